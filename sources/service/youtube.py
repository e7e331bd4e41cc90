"""
The YouTube back-end.

Uses yt-dlp to retrieve the channel (a YouTube channel or playlist) and its
items (videos), and to look up the audio streams of each video.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from datetime import timezone as dt_timezone
from itertools import islice
from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import urlencode

from sources.service.base import Backend
from sources.service.cache import TTLCache
from sources.service.config import get_youtube_default_limit
from sources.service.constants import (
    MIME_EXTENSIONS,
    YOUTUBE_BASE_URL,
    YOUTUBE_CATEGORY,
    YOUTUBE_CHANNEL_BASE_URL,
    YOUTUBE_HASHTAG_BASE_URL,
    YOUTUBE_LISTING_PAGE_SIZE,
    YOUTUBE_PLAYLIST_BASE_URL,
    YOUTUBE_PLAYLIST_PREFIXES,
    YOUTUBE_PREFERRED_MIME_TYPE,
    YOUTUBE_VIDEO_BASE_URL,
)
from sources.service.errors import InvalidChannelId, InvalidItemId, NoRedirectFound, ResolverError
from sources.service.models import Channel, Enclosure, Item
from sources.service.resolve import Stream, extract_info, get_streams

logger = logging.getLogger(__name__)

# Channel IDs (UC...), handles (@name) and playlist IDs
CHANNEL_ID_PATTERN = re.compile(r'^@?[A-Za-z0-9_.-]+$')
VIDEO_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]{11}$')
# A hashtag starts a word; '#' inside URLs is not a hashtag
HASHTAG_PATTERN = re.compile(r'(?<!\S)#(\w+)')
# Any format will do for a video lookup; the stream is chosen from the full format list
VIDEO_FORMAT = 'bestaudio/best'


@dataclass
class VideoWithStream:
    """A YouTube video with its selected audio stream"""

    info: dict
    stream: Stream


def is_valid_channel_id(channel_id):
    """Check the shape of an ID; IDs of only dots would escape the URL path."""
    return bool(CHANNEL_ID_PATTERN.match(channel_id)) and channel_id.lstrip('@').strip('.') != ''


def is_playlist_id(channel_id):
    """Return whether the ID is a playlist ID; anything else is a channel ID."""
    return channel_id.startswith(YOUTUBE_PLAYLIST_PREFIXES)


def select_audio_stream(streams):
    """
    Select the stream to use for a video.

    Only audio-only streams qualify. Streams in the preferred container win
    over others when there are any; the highest bitrate is taken.

    Returns:
        Stream, or None if there is no audio-only stream
    """
    audio_streams = [stream for stream in streams if stream.is_audio]
    preferred = [
        stream
        for stream in audio_streams
        if base_mime_type(stream.mime_type) == YOUTUBE_PREFERRED_MIME_TYPE
    ]
    candidates = preferred or audio_streams
    if not candidates:
        return None
    return max(candidates, key=lambda stream: stream.bitrate)


def base_mime_type(mime_type):
    """Strip parameters from a MIME type: 'audio/mp4; codecs="mp4a"' -> 'audio/mp4'"""
    return mime_type.split(';', 1)[0].strip().lower()


def extension_for_mime_type(mime_type):
    """Look up the file extension for a MIME type (empty if unknown)."""
    return MIME_EXTENSIONS.get(base_mime_type(mime_type), '')


def largest_thumbnail(thumbnails):
    """Return the URL of the thumbnail with the largest pixel area."""
    candidates = [thumb for thumb in thumbnails or [] if thumb.get('url')]
    if not candidates:
        return None
    best = max(candidates, key=lambda thumb: (thumb.get('width') or 0) * (thumb.get('height') or 0))
    return best['url']


def channel_image(thumbnails):
    """Return the largest avatar of a channel, banners are only used as fallback."""
    thumbnails = thumbnails or []
    avatars = [thumb for thumb in thumbnails if 'avatar' in str(thumb.get('id', ''))]
    return largest_thumbnail(avatars or thumbnails)


def hashtag_categories(description):
    """Map the hashtags in a video description to their YouTube hashtag URLs."""
    categories = {}
    for tag in HASHTAG_PATTERN.findall(description or ''):
        categories.setdefault(tag, f'{YOUTUBE_HASHTAG_BASE_URL}/{tag.lower()}')
    return categories


def video_url(video_id):
    return f'{YOUTUBE_VIDEO_BASE_URL}?{urlencode({"v": video_id})}'


def video_timestamp(info):
    """
    Return the best available upload time of a video.

    YouTube often only reports the upload date; noon UTC is used then.
    """
    timestamp = info.get('timestamp') or info.get('release_timestamp')
    if timestamp:
        return datetime.fromtimestamp(timestamp, tz=dt_timezone.utc)

    upload_date = info.get('upload_date')
    if upload_date:
        try:
            date = datetime.strptime(upload_date, '%Y%m%d')
        except ValueError:
            logger.debug('Ignoring invalid upload date %r', upload_date)
        else:
            return date.replace(hour=12, tzinfo=dt_timezone.utc)

    return datetime.now(dt_timezone.utc)


class YouTubeBackend(Backend):
    """The YouTube back-end"""

    def __init__(self, ttl=None):
        self.channel_cache = TTLCache('youtube:channel', ttl=ttl)
        self.playlist_cache = TTLCache('youtube:playlist', ttl=ttl)
        self.redirect_cache = TTLCache('youtube:redirect', ttl=ttl)

    def name(self):
        return 'YouTube'

    def channel(self, channel_id, item_limit=None):
        if not is_valid_channel_id(channel_id):
            raise InvalidChannelId(f'Invalid YouTube channel or playlist ID: {channel_id!r}')

        limit = get_youtube_default_limit() if item_limit is None else item_limit
        if is_playlist_id(channel_id):
            return self.playlist_cache.get_or_compute(
                (channel_id, limit), lambda: self.fetch_playlist(channel_id, limit)
            )
        return self.channel_cache.get_or_compute(
            (channel_id, limit), lambda: self.fetch_channel(channel_id, limit)
        )

    def redirect_url(self, file):
        path = PurePosixPath(file)
        video_id = path.stem
        if len(path.parts) != 1 or not VIDEO_ID_PATTERN.match(video_id):
            raise InvalidItemId(f'Invalid YouTube download file: {file!r}')

        return self.redirect_cache.get_or_compute(video_id, lambda: self.resolve_stream_url(video_id))

    def fetch_playlist(self, playlist_id, limit):
        """Fetch a playlist and up to limit of its videos that have an audio stream."""
        url = f'{YOUTUBE_PLAYLIST_BASE_URL}?{urlencode({"list": playlist_id})}'
        logger.info('Retrieving playlist %s from %s', playlist_id, url)
        info, videos = self.fetch_listing(url, limit)

        return Channel(
            title=f'{info.get("title") or playlist_id} (via YouTube)',
            link=url,
            description=info.get('description') or '',
            author=info.get('uploader') or info.get('channel'),
            categories=[YOUTUBE_CATEGORY],
            image=largest_thumbnail(info.get('thumbnails')),
            items=[item_from_video(video) for video in videos],
        )

    def fetch_channel(self, channel_id, limit):
        """Fetch a channel and those of its latest limit uploads that have an audio stream."""
        if channel_id.startswith('@'):
            link = f'{YOUTUBE_BASE_URL}/{channel_id}'
        else:
            link = f'{YOUTUBE_CHANNEL_BASE_URL}/{channel_id}'
        url = f'{link}/videos'
        logger.info('Retrieving channel %s from %s', channel_id, url)
        info, videos = self.fetch_listing(url, limit, count_dropped=True)

        if info.get('channel_id'):
            link = f'{YOUTUBE_CHANNEL_BASE_URL}/{info["channel_id"]}'
        name = info.get('channel') or info.get('uploader') or info.get('title') or channel_id

        return Channel(
            title=f'{name} (via YouTube)',
            link=link,
            description=info.get('description') or '',
            author=name,
            categories=[YOUTUBE_CATEGORY],
            image=channel_image(info.get('thumbnails')),
            items=[item_from_video(video) for video in videos],
        )

    def fetch_listing(self, url, limit, count_dropped=False):
        """
        Fetch a listing and the streams of its videos.

        Videos without a usable audio stream are skipped. With count_dropped
        only the first limit listed videos are looked at, so skipped videos
        still take a slot (channel uploads); otherwise lookups continue until
        limit videos have a stream (playlists). Listing windows are only
        fetched while more videos are needed.

        Returns:
            tuple: (listing info dict, list of VideoWithStream)
        """
        first_page = fetch_listing_page(url, 1)
        entries = iter_listing_entries(url, first_page)
        if count_dropped:
            entries = islice(entries, limit)
        candidates = (self.fetch_video(entry) for entry in entries)
        videos = list(islice((video for video in candidates if video), limit))
        return first_page, videos

    def fetch_video(self, entry) -> Optional[VideoWithStream]:
        """
        Fetch a listing entry's video with its stream.

        Problems with a single video are not fatal for the listing: the video
        is skipped and None is returned.
        """
        video_id = entry.get('id')
        if not video_id:
            return None

        try:
            info = extract_info(video_url(video_id), format=VIDEO_FORMAT, noplaylist=True)
        except ResolverError as e:
            logger.warning('Skipping video %s: %s', video_id, e)
            return None

        stream = select_audio_stream(get_streams(info))
        if stream is None:
            logger.warning('Skipping video %s: no audio stream available', video_id)
            return None

        return VideoWithStream(info=info, stream=stream)

    def resolve_stream_url(self, video_id):
        """Look up the currently valid URL of the selected audio stream of a video."""
        logger.info('Determining stream URL for video %s', video_id)
        info = extract_info(video_url(video_id), format=VIDEO_FORMAT, noplaylist=True)
        stream = select_audio_stream(get_streams(info))
        if stream is None:
            raise NoRedirectFound(f'No audio stream found for video {video_id}')
        return stream.url


def fetch_listing_page(url, start):
    """Fetch one window of a listing (flat entries, 1-based start)."""
    return extract_info(
        url,
        extract_flat='in_playlist',
        playliststart=start,
        playlistend=start + YOUTUBE_LISTING_PAGE_SIZE - 1,
    )


def iter_listing_entries(url, first_page):
    """Yield the entries of a listing, fetching further windows lazily."""
    page, start = first_page, 1
    while True:
        entries = list(page.get('entries') or [])
        for entry in entries:
            if entry:
                yield entry
        if len(entries) < YOUTUBE_LISTING_PAGE_SIZE:
            return
        start += YOUTUBE_LISTING_PAGE_SIZE
        page = fetch_listing_page(url, start)


def item_from_video(video):
    """Map a YouTube video with its stream to an Item."""
    info, stream = video.info, video.stream
    video_id = info['id']
    link = video_url(video_id)
    timestamp = video_timestamp(info)
    duration = info.get('duration')

    return Item(
        title=info.get('title') or video_id,
        link=link,
        description=f'Taken from YouTube: {link}',
        categories=hashtag_categories(info.get('description')),
        enclosure=Enclosure(
            file=f'{video_id}{extension_for_mime_type(stream.mime_type)}',
            mime_type=stream.mime_type,
            length=stream.content_length or 0,
        ),
        duration=int(duration) if duration else None,
        guid=video_id,
        keywords=list(info.get('tags') or []),
        image=largest_thumbnail(info.get('thumbnails')) or info.get('thumbnail'),
        published_at=timestamp,
        updated_at=timestamp,
    )
