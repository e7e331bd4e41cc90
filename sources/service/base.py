"""
Functionality shared by every content back-end.

A back-end provides a channel with its (content) items and resolves the
download file path of an item to a URL that a client can be redirected to.
"""


class Backend:
    """Base class for content back-ends"""

    def name(self):
        """Return the human-readable name of the back-end."""
        raise NotImplementedError

    def channel(self, channel_id, item_limit=None):
        """
        Return the channel with its currently contained content items.

        Args:
            channel_id: Provider-specific channel identifier
            item_limit: Maximum number of items (provider default when None)

        Returns:
            Channel

        Raises:
            BackendError: If the channel or any page of its items cannot be fetched
        """
        raise NotImplementedError

    def redirect_url(self, file):
        """
        Return the current direct media URL for an item's enclosure file.

        Args:
            file: Enclosure.file of an item previously returned by channel()

        Returns:
            str: URL to redirect the client to

        Raises:
            NoRedirectFound: If no usable media URL exists
            BackendError: On other failures
        """
        raise NotImplementedError
