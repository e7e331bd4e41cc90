"""
Provider and media format constants.

Centralized definitions of provider URLs, paging sizes and MIME types.
"""

# Mixcloud
MIXCLOUD_API_BASE_URL = 'https://api.mixcloud.com'
MIXCLOUD_FILES_BASE_URL = 'https://www.mixcloud.com'
# Mixcloud does not report file sizes; lengths are estimated with this bitrate (bits/s)
MIXCLOUD_DEFAULT_BITRATE = 64 * 1024
MIXCLOUD_DEFAULT_FILE_TYPE = 'audio/mpeg'
MIXCLOUD_FILE_EXTENSION = '.m4a'
MIXCLOUD_PAGE_SIZE = 50
# TODO: derive the category from the user's cloudcast tags instead
MIXCLOUD_CATEGORY = 'Music'

# YouTube
YOUTUBE_CHANNEL_BASE_URL = 'https://www.youtube.com/channel'
YOUTUBE_PLAYLIST_BASE_URL = 'https://www.youtube.com/playlist'
YOUTUBE_VIDEO_BASE_URL = 'https://www.youtube.com/watch'
YOUTUBE_HASHTAG_BASE_URL = 'https://www.youtube.com/hashtag'
YOUTUBE_BASE_URL = 'https://www.youtube.com'
# Playlist IDs start with one of these; anything else is treated as a channel
YOUTUBE_PLAYLIST_PREFIXES = ('PL', 'OLAK', 'RDCLAK')
# Number of listing entries requested from yt-dlp at a time
YOUTUBE_LISTING_PAGE_SIZE = 50
YOUTUBE_CATEGORY = 'Video'
# Audio container preferred when selecting a stream, widely supported by podcast players
YOUTUBE_PREFERRED_MIME_TYPE = 'audio/mp4'

# MIME type (without parameters) -> file extension
MIME_EXTENSIONS = {
    'audio/mp4': '.m4a',
    'audio/mpeg': '.mp3',
    'audio/webm': '.webm',
    'audio/ogg': '.ogg',
    'audio/aac': '.aac',
    'audio/flac': '.flac',
    'audio/wav': '.wav',
    'video/mp4': '.mp4',
    'video/webm': '.webm',
}

# yt-dlp container extension -> MIME subtype
CONTAINER_SUBTYPES = {
    'm4a': 'mp4',
    'mp4': 'mp4',
    'webm': 'webm',
    'mp3': 'mpeg',
    'ogg': 'ogg',
    'opus': 'ogg',
    'aac': 'aac',
    'flac': 'flac',
    'wav': 'wav',
}
