from datetime import datetime
from datetime import timezone as dt_timezone

from django.utils.feedgenerator import Enclosure, Rss201rev2Feed

from relaycast import __version__

# lastBuildDate of a channel without items
EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)


class PodcastRSSFeed(Rss201rev2Feed):
    """
    RSS 2.0 feed generator with the iTunes podcast extensions.

    Channel extras are passed as feed kwargs (generator, image, author,
    itunes_categories, lastBuildDate), item extras as item kwargs
    (category_domains, image, duration, keywords).
    """

    def rss_attributes(self):
        attrs = super().rss_attributes()
        attrs['xmlns:itunes'] = 'http://www.itunes.com/dtds/podcast-1.0.dtd'
        return attrs

    def latest_post_date(self):
        """Use the explicit lastBuildDate instead of deriving it from pubDates."""
        last_build = self.feed.get('lastBuildDate')
        if last_build:
            return last_build
        return super().latest_post_date()

    def add_root_elements(self, handler):
        super().add_root_elements(handler)
        handler.addQuickElement('generator', self.feed.get('generator', ''))

        image = self.feed.get('image')
        if image and image.get('url'):
            handler.startElement('image', {})
            handler.addQuickElement('url', image.get('url'))
            handler.addQuickElement('title', image.get('title', ''))
            handler.addQuickElement('link', image.get('link', ''))
            handler.endElement('image')

        if self.feed.get('author'):
            handler.addQuickElement('itunes:author', self.feed['author'])
        for category in self.feed.get('itunes_categories') or []:
            handler.addQuickElement('itunes:category', '', {'text': category})
        if image and image.get('url'):
            handler.addQuickElement('itunes:image', '', {'href': image['url']})
        handler.addQuickElement('itunes:explicit', 'no')
        handler.addQuickElement('itunes:summary', self.feed['description'])

    def add_item_elements(self, handler, item):
        super().add_item_elements(handler, item)
        for name, domain in (item.get('category_domains') or {}).items():
            handler.addQuickElement('category', name, {'domain': domain})

        if item.get('image'):
            handler.addQuickElement('itunes:image', '', {'href': item['image']})
        if item.get('duration') is not None:
            handler.addQuickElement('itunes:duration', str(item['duration']))
        if item.get('description') is not None:
            handler.addQuickElement('itunes:subtitle', item['description'])
        handler.addQuickElement('itunes:keywords', ', '.join(item.get('keywords') or []))


def download_url(backend_id, public_url, file):
    """Build the URL a podcast client downloads an item's enclosure from."""
    return f'{public_url.rstrip("/")}/download/{backend_id}/{file}'


def last_build_date(channel):
    """Return the latest item update, or the epoch for an empty channel."""
    return max((item.updated_at for item in channel.items), default=EPOCH)


def build_feed(backend_id, public_url, channel):
    """
    Build the podcast feed of a channel.

    Args:
        backend_id: Back-end the channel came from, part of the download URLs
        public_url: URL the service is hosted at
        channel: Channel to build the feed for

    Returns:
        PodcastRSSFeed: Call writeString('utf-8') for the document
    """
    image = None
    if channel.image:
        image = {'url': channel.image, 'title': channel.title, 'link': channel.link}

    feed = PodcastRSSFeed(
        title=channel.title,
        link=channel.link,
        description=channel.description,
        # RSS carries a single "main" category
        categories=[channel.categories[0] if channel.categories else ''],
        lastBuildDate=last_build_date(channel),
        generator=f'relaycast {__version__}',
        image=image,
        author=channel.author,
        itunes_categories=list(channel.categories),
    )

    for item in channel.items:
        enclosure = item.enclosure
        feed.add_item(
            title=item.title,
            link=item.link,
            description=item.description,
            unique_id=item.guid,
            unique_id_is_permalink=False,
            pubdate=item.updated_at,
            enclosures=[
                Enclosure(
                    download_url(backend_id, public_url, enclosure.file),
                    str(enclosure.length),
                    enclosure.mime_type,
                )
            ],
            category_domains=item.categories,
            image=item.image,
            duration=item.duration,
            keywords=item.keywords,
        )

    return feed
