"""
API Module - REST API for PeerLink

Provides the HTTP upload/download endpoints.
"""

from .rest import create_app, run_api_server

__all__ = ['create_app', 'run_api_server']
