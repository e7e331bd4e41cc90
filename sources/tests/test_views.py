"""
Tests for the HTTP views
"""

from datetime import datetime
from datetime import timezone as dt_timezone
from unittest.mock import MagicMock, patch

from django.test import Client, SimpleTestCase, override_settings

from sources.service.errors import (
    InvalidChannelId,
    NoRedirectFound,
    ResolverError,
    UpstreamHTTPError,
)
from sources.service.models import Channel, Enclosure, Item


def make_channel():
    updated_at = datetime(2024, 1, 2, 10, 0, tzinfo=dt_timezone.utc)
    return Channel(
        title='DJ Example (via Mixcloud)',
        link='https://www.mixcloud.com/dj/',
        description='Mixes from the basement',
        categories=['Music'],
        items=[
            Item(
                title='Mix 0',
                link='https://www.mixcloud.com/dj/mix-0/',
                description='Taken from Mixcloud: https://www.mixcloud.com/dj/mix-0/',
                enclosure=Enclosure(file='dj/mix-0.m4a', mime_type='audio/mpeg', length=1000),
                guid='mix-0',
                published_at=updated_at,
                updated_at=updated_at,
            )
        ],
    )


class IndexViewTest(SimpleTestCase):
    """Tests for the landing page"""

    @override_settings(RELAYCAST_URL='https://relay.example.com')
    def test_index(self):
        response = Client().get('/')

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'https://relay.example.com/feed/mixcloud/')
        self.assertContains(response, 'youtube')


@override_settings(RELAYCAST_URL='https://relay.example.com')
class FeedViewTest(SimpleTestCase):
    """Tests for the feed endpoint"""

    def setUp(self):
        self.client = Client()
        self.backend = MagicMock()
        self.backend.channel.return_value = make_channel()
        patcher = patch('sources.views.backends.get', return_value=self.backend)
        self.mock_get = patcher.start()
        self.addCleanup(patcher.stop)

    def test_feed(self):
        response = self.client.get('/feed/mixcloud/dj')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'application/xml')
        self.assertContains(response, 'https://relay.example.com/download/mixcloud/dj/mix-0.m4a')
        self.mock_get.assert_called_once_with('mixcloud')
        self.backend.channel.assert_called_once_with('dj', None)

    def test_limit(self):
        response = self.client.get('/feed/mixcloud/dj', {'limit': '75'})

        self.assertEqual(response.status_code, 200)
        self.backend.channel.assert_called_once_with('dj', 75)

    def test_invalid_limit(self):
        """Test that limits must be positive integers"""
        for limit in ['abc', '0', '-3', '1.5', '']:
            with self.subTest(limit=limit):
                response = self.client.get('/feed/mixcloud/dj', {'limit': limit})

                self.assertEqual(response.status_code, 400)
                self.assertIn('limit', response.json()['error'])
        self.backend.channel.assert_not_called()

    @override_settings(RELAYCAST_URL='')
    def test_public_url_from_request(self):
        """Test that download links use the request host without a configured URL"""
        response = self.client.get('/feed/mixcloud/dj')

        self.assertContains(response, 'http://testserver/download/mixcloud/dj/mix-0.m4a')

    def test_backend_errors_are_500(self):
        for error in [
            UpstreamHTTPError('Mixcloud API error', status_code=404),
            InvalidChannelId('Invalid Mixcloud username'),
            ResolverError('yt-dlp failed'),
        ]:
            with self.subTest(error=error):
                self.backend.channel.side_effect = error

                response = self.client.get('/feed/mixcloud/dj')

                self.assertEqual(response.status_code, 500)
                self.assertEqual(response.json(), {'error': str(error)})


class UnsupportedBackendViewTest(SimpleTestCase):
    """Tests for requests naming an unknown back-end"""

    @patch('sources.service.mixcloud.requests.get')
    def test_feed(self, mock_get):
        response = Client().get('/feed/unknown-provider/dj')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'error': 'Unsupported back-end: unknown-provider'})
        mock_get.assert_not_called()

    def test_download(self):
        response = Client().get('/download/unknown-provider/dj/mix.m4a')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'error': 'Unsupported back-end: unknown-provider'})


class DownloadViewTest(SimpleTestCase):
    """Tests for the download endpoint"""

    def setUp(self):
        self.client = Client()
        self.backend = MagicMock()
        patcher = patch('sources.views.backends.get', return_value=self.backend)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_redirect(self):
        self.backend.redirect_url.return_value = 'https://stream.example.com/mix-0.m4a'

        response = self.client.get('/download/mixcloud/dj/mix-0.m4a')

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response['Location'], 'https://stream.example.com/mix-0.m4a')
        self.backend.redirect_url.assert_called_once_with('dj/mix-0.m4a')

    def test_no_redirect_found_is_404(self):
        self.backend.redirect_url.side_effect = NoRedirectFound()

        response = self.client.get('/download/youtube/abcdefghijk.m4a')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'error': 'No redirect URL found'})

    def test_other_errors_are_500(self):
        self.backend.redirect_url.side_effect = ResolverError('yt-dlp failed')

        response = self.client.get('/download/youtube/abcdefghijk.m4a')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'error': 'yt-dlp failed'})
