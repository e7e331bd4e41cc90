"""
Service layer for channel sources.

This module contains the provider back-ends and the pieces they share,
independent of the HTTP views. These functions are used by:
- The feed and download views (sources/views.py)
- The CLI management commands (management/commands/feed.py, resolve.py)
"""
