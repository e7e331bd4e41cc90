"""
Configuration adapter for back-end settings.

Centralizes access to Django settings, ensuring consistent configuration
across the web views and the management commands.
"""

import shlex

from django.conf import settings


def get_public_url():
    """Get the URL the service is hosted at, without trailing slash ('' when unset)"""
    return (settings.RELAYCAST_URL or '').rstrip('/')


def get_cache_ttl():
    """Get the time-to-live for cached provider results (seconds)"""
    return settings.RELAYCAST_CACHE_TTL


def get_cache_alias():
    """Get the Django cache alias backing the TTL caches"""
    return settings.RELAYCAST_CACHE_ALIAS


def get_http_timeout():
    """Get the timeout for provider API requests (seconds)"""
    return settings.RELAYCAST_HTTP_TIMEOUT


def get_youtube_default_limit():
    """Get the number of YouTube items in a feed when no limit is requested"""
    return settings.RELAYCAST_YOUTUBE_DEFAULT_LIMIT


def get_ytdlp_opts(**overrides):
    """
    Build the yt-dlp options used for metadata extraction.

    Args:
        **overrides: Options that take precedence over the defaults

    Returns:
        dict: yt-dlp options
    """
    ydl_opts = {
        'quiet': True,
        'no_warnings': True,
        'skip_download': True,
    }

    # Add proxy if configured (needed for cloud VMs where YouTube blocks requests)
    if settings.RELAYCAST_YTDLP_PROXY:
        ydl_opts['proxy'] = settings.RELAYCAST_YTDLP_PROXY

    ydl_opts = parse_ytdlp_extra_args(settings.RELAYCAST_YTDLP_ARGS, ydl_opts)
    ydl_opts.update(overrides)
    return ydl_opts


def parse_ytdlp_extra_args(args_string, base_opts):
    """
    Parse yt-dlp extra arguments string and apply to base options dict.

    Only options relevant to metadata extraction are understood; anything
    else is ignored.

    Args:
        args_string: String of yt-dlp arguments (e.g., '--proxy socks5://host:1080')
        base_opts: Base yt-dlp options dict to update

    Returns:
        dict: Updated yt-dlp options dict

    Example:
        >>> parse_ytdlp_extra_args('--socket-timeout 20 -f bestaudio', {'quiet': True})
        {'quiet': True, 'socket_timeout': 20.0, 'format': 'bestaudio'}
    """
    if not args_string:
        return base_opts

    # option -> (yt-dlp key, converter)
    valued_args = {
        '--format': ('format', str),
        '-f': ('format', str),
        '--proxy': ('proxy', str),
        '--socket-timeout': ('socket_timeout', float),
        '--cookies': ('cookiefile', str),
        '--user-agent': ('http_headers', lambda value: {'User-Agent': value}),
    }

    args_list = shlex.split(args_string)
    i = 0
    while i < len(args_list):
        arg = args_list[i]
        if arg in valued_args and i + 1 < len(args_list):
            key, convert = valued_args[arg]
            base_opts[key] = convert(args_list[i + 1])
            i += 2
        else:
            # Skip unknown args
            i += 1

    return base_opts
