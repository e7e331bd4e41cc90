"""
URL configuration for relaycast project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/stable/topics/http/urls/
"""

from django.urls import path

from sources.views import download_view, feed_view, index_view

urlpatterns = [
    # Landing page
    path('', index_view, name='index'),
    # Public endpoints
    path('feed/<str:backend_id>/<str:channel_id>', feed_view, name='feed'),
    path('download/<str:backend_id>/<path:file>', download_view, name='download'),
]
