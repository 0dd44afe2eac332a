"""
HTTP query interface over a crawled index.
"""

from .server import create_app, serve

__all__ = ['create_app', 'serve']
