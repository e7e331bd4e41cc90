"""
Errors raised by the back-ends.

Views map NoRedirectFound to a 404 response and every other BackendError to a 500.
"""


class BackendError(Exception):
    """Base class for all back-end failures"""

    pass


class TransportError(BackendError):
    """Raised when a provider could not be reached (connection, timeout, I/O)"""

    pass


class UpstreamHTTPError(BackendError):
    """Raised when a provider answers with a non-2xx status"""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponse(BackendError):
    """Raised when a provider response cannot be parsed or lacks required fields"""

    pass


class UnsupportedBackend(BackendError):
    """Raised for an unknown back-end identifier"""

    def __init__(self, backend_id):
        super().__init__(f'Unsupported back-end: {backend_id}')
        self.backend_id = backend_id


class InvalidChannelId(BackendError):
    """Raised when a channel ID does not have a shape the provider accepts"""

    pass


class InvalidItemId(BackendError):
    """Raised when a download file does not map to a valid provider item"""

    pass


class NoRedirectFound(BackendError):
    """Raised when no usable direct media URL could be determined"""

    def __init__(self, message='No redirect URL found'):
        super().__init__(message)


class ResolverError(BackendError):
    """Raised when yt-dlp fails while resolving a page"""

    pass
