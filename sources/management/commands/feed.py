"""
Django management command for building a feed.

Prints the podcast feed of a back-end channel, exactly as the feed view would
serve it.
"""

from django.core.management.base import BaseCommand, CommandError

from sources.feeds import build_feed
from sources.service import backends
from sources.service.config import get_public_url
from sources.service.errors import BackendError


class Command(BaseCommand):
    help = 'Print the podcast feed of a back-end channel'

    def add_arguments(self, parser):
        parser.add_argument('backend', type=str, help='Back-end ID (e.g. mixcloud, youtube)')
        parser.add_argument('channel', type=str, help='Channel ID within the back-end')
        parser.add_argument('--limit', type=int, default=None, help='Maximum number of items')
        parser.add_argument(
            '--url',
            type=str,
            default=None,
            help='Public URL used for download links (default: RELAYCAST_URL)',
        )

    def handle(self, *args, **options):
        backend_id = options['backend']
        channel_id = options['channel']
        limit = options['limit']
        public_url = options['url'] or get_public_url()

        if limit is not None and limit < 1:
            raise CommandError('--limit must be a positive integer')
        if not public_url:
            raise CommandError('No public URL: pass --url or set RELAYCAST_URL')

        try:
            channel = backends.get(backend_id).channel(channel_id, limit)
        except BackendError as e:
            raise CommandError(str(e)) from e

        feed = build_feed(backend_id, public_url, channel)
        self.stdout.write(feed.writeString('utf-8'))
