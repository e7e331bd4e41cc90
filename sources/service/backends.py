"""
Registry of the supported content back-ends.

The set of back-ends is closed: an identifier from the request URL is matched
against the known ones and anything else is rejected before any network
activity takes place.
"""

from sources.service.errors import UnsupportedBackend
from sources.service.mixcloud import MixcloudBackend
from sources.service.youtube import YouTubeBackend

BACKEND_IDS = ('mixcloud', 'youtube')


def get(backend_id):
    """
    Return the back-end for an identifier.

    Args:
        backend_id: Identifier as used in feed and download URLs

    Returns:
        Backend

    Raises:
        UnsupportedBackend: If the identifier is unknown
    """
    if backend_id == 'mixcloud':
        return MixcloudBackend()
    elif backend_id == 'youtube':
        return YouTubeBackend()
    raise UnsupportedBackend(backend_id)
