"""
Django management command for resolving a download.

Prints the URL a download of an item's enclosure file would redirect to.
"""

from django.core.management.base import BaseCommand, CommandError

from sources.service import backends
from sources.service.errors import BackendError


class Command(BaseCommand):
    help = 'Print the media URL for the enclosure file of a back-end item'

    def add_arguments(self, parser):
        parser.add_argument('backend', type=str, help='Back-end ID (e.g. mixcloud, youtube)')
        parser.add_argument('file', type=str, help='Enclosure file as used in download URLs')

    def handle(self, *args, **options):
        try:
            url = backends.get(options['backend']).redirect_url(options['file'])
        except BackendError as e:
            raise CommandError(str(e)) from e

        self.stdout.write(url)
