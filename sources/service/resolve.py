"""
Metadata extraction and direct media URL resolution.

Wraps yt-dlp: fetching page/listing metadata, turning format lists into
streams, and resolving a provider page to a single direct media URL.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import yt_dlp

from sources.service.config import get_ytdlp_opts
from sources.service.constants import CONTAINER_SUBTYPES
from sources.service.errors import NoRedirectFound, ResolverError

logger = logging.getLogger(__name__)


@dataclass
class Stream:
    """A single media stream (format) of a video"""

    url: str
    mime_type: str
    # Bits per second (0 when unknown)
    bitrate: int
    is_audio: bool
    # Bytes, exact or approximate (None when unknown)
    content_length: Optional[int] = None


def extract_info(url, **opts):
    """
    Fetch metadata for a page or listing without downloading anything.

    Args:
        url: Provider page URL
        **opts: yt-dlp options overriding the configured defaults

    Returns:
        dict: yt-dlp info dict

    Raises:
        ResolverError: If yt-dlp fails or returns nothing
    """
    ydl_opts = get_ytdlp_opts(**opts)

    try:
        with yt_dlp.YoutubeDL(ydl_opts) as ydl:
            info = ydl.extract_info(url, download=False)
    except yt_dlp.utils.YoutubeDLError as e:
        raise ResolverError(f'yt-dlp failed for {url}: {e}') from e

    if not info:
        raise ResolverError(f'yt-dlp returned no metadata for {url}')

    return info


def stream_from_format(fmt, duration=None):
    """
    Build a Stream from a yt-dlp format dict.

    Args:
        fmt: yt-dlp format dict
        duration: Media duration in seconds, used to estimate missing sizes

    Returns:
        Stream, or None if the format has no URL
    """
    url = fmt.get('url')
    if not url:
        return None

    vcodec = fmt.get('vcodec')
    acodec = fmt.get('acodec')
    has_audio = acodec not in (None, 'none')
    is_audio = has_audio and vcodec == 'none'

    ext = fmt.get('ext') or ''
    subtype = CONTAINER_SUBTYPES.get(ext, ext)
    mime_type = f'{"audio" if is_audio else "video"}/{subtype}'
    if has_audio:
        mime_type = f'{mime_type}; codecs="{acodec}"'

    # abr/tbr are in kbit/s
    kbps = fmt.get('abr') or fmt.get('tbr') or 0
    bitrate = int(round(kbps * 1000))

    content_length = fmt.get('filesize') or fmt.get('filesize_approx')
    if not content_length and bitrate and duration:
        content_length = int(bitrate * duration / 8)

    return Stream(
        url=url,
        mime_type=mime_type,
        bitrate=bitrate,
        is_audio=is_audio,
        content_length=int(content_length) if content_length else None,
    )


def get_streams(info):
    """Return the streams of a single-video info dict."""
    duration = info.get('duration')
    streams = []
    for fmt in info.get('formats') or []:
        stream = stream_from_format(fmt, duration=duration)
        if stream:
            streams.append(stream)
    return streams


def resolve_direct_url(page_url):
    """
    Resolve a provider page URL to a direct media URL.

    Args:
        page_url: Public page URL of a single media item

    Returns:
        str: Direct media URL

    Raises:
        NoRedirectFound: If yt-dlp does not yield a single direct URL
        ResolverError: If yt-dlp fails
    """
    logger.info('Determining direct URL for %s', page_url)
    info = extract_info(page_url, format='bestaudio/best', noplaylist=True)

    if 'entries' in info:
        raise NoRedirectFound(f'{page_url} is not a single media item')

    url = info.get('url')
    if not url:
        raise NoRedirectFound(f'No direct URL found for {page_url}')

    return url
