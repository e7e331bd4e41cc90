import logging

from django.http import HttpResponse, JsonResponse
from django.shortcuts import redirect, render

from sources.feeds import build_feed
from sources.service import backends
from sources.service.config import get_public_url
from sources.service.errors import BackendError, NoRedirectFound

logger = logging.getLogger(__name__)


def _public_url(request):
    """Return the configured public URL, or the URL of the current host."""
    return get_public_url() or request.build_absolute_uri('/').rstrip('/')


def _error_response(error):
    """Map a back-end error to a JSON error response."""
    status = 404 if isinstance(error, NoRedirectFound) else 500
    return JsonResponse({'error': str(error)}, status=status)


def index_view(request):
    """Landing page explaining how to construct feed URLs."""
    return render(
        request,
        'sources/index.html',
        {'public_url': _public_url(request), 'backend_ids': backends.BACKEND_IDS},
    )


def feed_view(request, backend_id, channel_id):
    """
    Podcast feed of a back-end channel.

    Params:
        limit (optional): Maximum number of items, a positive integer

    Returns:
        RSS document, or JSON error response
    """
    limit = request.GET.get('limit')
    if limit is not None:
        try:
            limit = int(limit)
        except ValueError:
            limit = 0
        if limit < 1:
            return JsonResponse({'error': 'Invalid limit parameter. Must be a positive integer'}, status=400)

    try:
        backend = backends.get(backend_id)
        channel = backend.channel(channel_id, limit)
    except BackendError as e:
        logger.error('Could not build feed for %s/%s: %s', backend_id, channel_id, e)
        return _error_response(e)

    feed = build_feed(backend_id, _public_url(request), channel)
    return HttpResponse(feed.writeString('utf-8'), content_type='application/xml')


def download_view(request, backend_id, file):
    """Redirect to the current media URL of an item's enclosure file."""
    try:
        backend = backends.get(backend_id)
        url = backend.redirect_url(file)
    except BackendError as e:
        logger.error('Could not resolve download %s/%s: %s', backend_id, file, e)
        return _error_response(e)

    return redirect(url)
