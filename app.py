"""Composite Flask runner

Run this file to serve both apps together:
- questly app (upload page, question generation, printable page) at the site root (/)
- preferences app mounted at /prefs

Usage:
    python app.py
"""
import os
import logging
from werkzeug.middleware.dispatcher import DispatcherMiddleware
from werkzeug.serving import run_simple

from questly import app as questly_app
from preferences import app as preferences_app

LOG = logging.getLogger("questly")
logging.basicConfig(level=logging.INFO)


def make_app(root_app=None, prefs_app=None):
    """Compose apps and return a WSGI application."""
    mounts = {
        '/prefs': prefs_app or preferences_app,
    }
    return DispatcherMiddleware(root_app or questly_app, mounts)


if __name__ == "__main__":
    wsgi_app = make_app()
    port = int(os.getenv('PORT', 5000))
    LOG.info("Starting composed server on http://0.0.0.0:%d ...", port)
    run_simple('0.0.0.0', port, wsgi_app, use_reloader=True, use_debugger=True)
