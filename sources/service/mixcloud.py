"""
The Mixcloud back-end.

Uses the Mixcloud API to retrieve the channel (a user) and its items (the
user's cloudcasts). See also: https://www.mixcloud.com/developers/
"""

import logging
import re
from dataclasses import replace
from datetime import timezone as dt_timezone
from pathlib import PurePosixPath
from urllib.parse import urlsplit, urlunsplit

import requests
from django.utils.dateparse import parse_datetime

from sources.service.base import Backend
from sources.service.cache import TTLCache
from sources.service.config import get_http_timeout
from sources.service.constants import (
    MIXCLOUD_API_BASE_URL,
    MIXCLOUD_CATEGORY,
    MIXCLOUD_DEFAULT_BITRATE,
    MIXCLOUD_DEFAULT_FILE_TYPE,
    MIXCLOUD_FILE_EXTENSION,
    MIXCLOUD_FILES_BASE_URL,
    MIXCLOUD_PAGE_SIZE,
)
from sources.service.errors import (
    InvalidChannelId,
    InvalidItemId,
    MalformedResponse,
    TransportError,
    UpstreamHTTPError,
)
from sources.service.models import Channel, Enclosure, Item
from sources.service.resolve import resolve_direct_url

logger = logging.getLogger(__name__)

# Usernames and cloudcast slugs
NAME_PATTERN = re.compile(r'^[A-Za-z0-9_.-]+$')


def is_valid_name(name):
    """Check a username or slug; names of only dots would escape the URL path."""
    return bool(NAME_PATTERN.match(name)) and name.strip('.') != ''


class MixcloudBackend(Backend):
    """The Mixcloud back-end"""

    def __init__(self, ttl=None):
        self.user_cache = TTLCache('mixcloud:user', ttl=ttl)
        self.cloudcasts_cache = TTLCache('mixcloud:cloudcasts', ttl=ttl)
        self.redirect_cache = TTLCache('mixcloud:redirect', ttl=ttl)

    def name(self):
        return 'Mixcloud'

    def channel(self, channel_id, item_limit=None):
        # For Mixcloud a channel ID is a username
        if not is_valid_name(channel_id):
            raise InvalidChannelId(f'Invalid Mixcloud username: {channel_id!r}')

        user_url = f'{MIXCLOUD_API_BASE_URL}/{channel_id}/'
        logger.info('Retrieving user %s from %s', channel_id, user_url)
        channel = self.fetch_user(user_url)

        # The items of a channel are the user's cloudcasts
        cloudcasts_url = f'{MIXCLOUD_API_BASE_URL}/{channel_id}/cloudcasts/'
        logger.info('Retrieving cloudcasts of user %s from %s', channel_id, cloudcasts_url)
        items = self.fetch_cloudcasts(cloudcasts_url, item_limit)

        return replace(channel, items=items)

    def redirect_url(self, file):
        key = download_key(file)
        return self.redirect_cache.get_or_compute(
            key, lambda: resolve_direct_url(f'{MIXCLOUD_FILES_BASE_URL}{key}')
        )

    def fetch_user(self, url):
        """Fetch the user from the URL as a Channel without items (cached per URL)."""
        return self.user_cache.get_or_compute(url, lambda: parse_user(get_json(url), url))

    def fetch_cloudcasts_page(self, url, limit, offset):
        """
        Fetch a single page of cloudcasts (cached per URL and paging).

        Returns:
            tuple: (list of Item, next page URL or None)
        """
        params = paging_params(limit, offset)
        return self.cloudcasts_cache.get_or_compute(
            (url, params['limit'], params['offset']),
            lambda: parse_cloudcasts_page(get_json(url, params=params), url),
        )

    def fetch_cloudcasts(self, url, item_limit=None):
        """
        Fetch cloudcasts page by page until the limit is reached or no pages are left.

        Args:
            url: API URL of the cloudcasts listing
            item_limit: Maximum number of cloudcasts (one page when None)

        Returns:
            list: Items in provider order
        """
        limit = MIXCLOUD_PAGE_SIZE if item_limit is None else item_limit
        remaining = limit
        offset = 0
        items = []

        while remaining > 0:
            page_items, next_url = self.fetch_cloudcasts_page(url, remaining, offset)
            count = len(page_items)
            items.extend(page_items)
            remaining = max(remaining - count, 0)
            offset += count

            # An empty page would request the same page again
            if not next_url or not count:
                break
            url = without_query(next_url)

        return items[:limit]


def paging_params(limit, offset):
    """
    Return the paging query parameters.

    The limit is capped to the page size; another request is necessary to
    retrieve more.
    """
    return {'limit': min(limit, MIXCLOUD_PAGE_SIZE), 'offset': offset}


def without_query(url):
    """Strip the query and fragment of a URL."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, '', ''))


def get_json(url, params=None):
    """
    Fetch a JSON document from the Mixcloud API.

    Raises:
        TransportError: If the API could not be reached
        UpstreamHTTPError: If the API answered with an error status
        MalformedResponse: If the body is not JSON
    """
    try:
        response = requests.get(url, params=params, timeout=get_http_timeout())
        response.raise_for_status()
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        raise UpstreamHTTPError(f'Mixcloud API error for {url}: {e}', status_code=status) from e
    except requests.RequestException as e:
        raise TransportError(f'Could not reach Mixcloud API at {url}: {e}') from e

    try:
        return response.json()
    except ValueError as e:
        raise MalformedResponse(f'Invalid JSON from {url}') from e


def download_key(file):
    """
    Turn an enclosure file path back into a cloudcast key.

    'user/some-mix.m4a' -> '/user/some-mix/'
    """
    path = PurePosixPath(file)
    parts = path.with_suffix('').parts if path.suffix else path.parts
    if len(parts) != 2 or not all(is_valid_name(part) for part in parts):
        raise InvalidItemId(f'Invalid Mixcloud download file: {file!r}')
    return f'/{parts[0]}/{parts[1]}/'


def estimated_file_size(duration):
    """
    Return the estimated file size in bytes for a duration in seconds.

    Uses MIXCLOUD_DEFAULT_BITRATE, which is in bits/s.
    """
    return MIXCLOUD_DEFAULT_BITRATE * duration // 8


def parse_timestamp(value):
    """Parse an API timestamp into an aware UTC datetime."""
    parsed = parse_datetime(value) if value else None
    if parsed is None:
        raise ValueError(f'Invalid timestamp: {value!r}')
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt_timezone.utc)
    return parsed.astimezone(dt_timezone.utc)


def parse_user(user, url):
    """
    Map a user API response to a Channel without items.

    Raises:
        MalformedResponse: If the response lacks required fields
    """
    try:
        return channel_from_user(user)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise MalformedResponse(f'Unexpected user response from {url}: {e!r}') from e


def parse_cloudcasts_page(page, url):
    """
    Map a cloudcasts API response to its items and the next page URL.

    Raises:
        MalformedResponse: If the response does not have the expected shape
    """
    try:
        data = page['data']
        if not isinstance(data, list):
            raise TypeError(f'data is a {type(data).__name__}, not a list')
        next_url = (page.get('paging') or {}).get('next')
        if next_url is not None and not isinstance(next_url, str):
            raise TypeError(f'paging.next is a {type(next_url).__name__}, not a string')
        items = [item_from_cloudcast(cloudcast) for cloudcast in data]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise MalformedResponse(f'Unexpected cloudcasts response from {url}: {e!r}') from e
    return items, next_url


def channel_from_user(user):
    """Map a Mixcloud user to a Channel; its items are added separately."""
    return Channel(
        title=f'{user["name"]} (via Mixcloud)',
        link=user['url'],
        description=user.get('biog') or '',
        author=user['name'],
        categories=[MIXCLOUD_CATEGORY],
        image=(user.get('pictures') or {}).get('large'),
    )


def item_from_cloudcast(cloudcast):
    """Map a Mixcloud cloudcast to an Item."""
    file = cloudcast['key'].strip('/') + MIXCLOUD_FILE_EXTENSION
    duration = cloudcast.get('audio_length')
    tags = cloudcast.get('tags') or []
    updated_at = parse_timestamp(cloudcast['updated_time'])
    created_time = cloudcast.get('created_time')
    published_at = parse_timestamp(created_time) if created_time else updated_at

    return Item(
        title=cloudcast['name'],
        link=cloudcast['url'],
        description=f'Taken from Mixcloud: {cloudcast["url"]}',
        categories={tag['name']: tag['url'] for tag in tags},
        enclosure=Enclosure(
            file=file,
            mime_type=MIXCLOUD_DEFAULT_FILE_TYPE,
            length=estimated_file_size(int(duration or 0)),
        ),
        duration=duration,
        guid=cloudcast['slug'],
        keywords=[tag['name'] for tag in tags],
        image=(cloudcast.get('pictures') or {}).get('large'),
        published_at=published_at,
        updated_at=updated_at,
    )
