from django.apps import AppConfig


class SourcesConfig(AppConfig):
    name = 'sources'
    verbose_name = 'Podcast sources'
