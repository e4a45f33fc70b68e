#!/usr/bin/env python3
"""
start_server.py
===============

Production startup script for the product mix API using Waitress.

Host, port, thread count and URL scheme come from the app's configuration
(``SERVER_*`` in ``config.py``), so the server and ``/health`` always agree
on which environment is running. ``FLASK_ENV`` defaults to ``production``.
"""

import os
import sys
import logging

from flask import Flask
from waitress import serve


def setup_logging(log_level: str):
    """Route app and waitress logs to stdout"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    logging.getLogger('waitress').setLevel(logging.INFO)


def server_options(app: Flask) -> dict:
    """Waitress keyword arguments for ``app``"""
    return {
        'host': app.config['SERVER_HOST'],
        'port': app.config['SERVER_PORT'],
        'threads': app.config['SERVER_THREADS'],
        'url_scheme': app.config['SERVER_URL_SCHEME'],
        'ident': 'Product-Mix-API',
    }


def main(config_name: str = None):
    """Start the production server"""
    os.environ.setdefault('FLASK_ENV', 'production')
    setup_logging(os.environ.get('LOG_LEVEL', 'INFO'))

    # Imported late so the module-level app sees FLASK_ENV and our logging
    from app import create_app
    app = create_app(config_name)
    logger = logging.getLogger(__name__)

    options = server_options(app)
    logger.info(
        f"Starting Product Mix API ({app.config['ENV_NAME']}) on "
        f"{options['host']}:{options['port']} with {options['threads']} threads"
    )
    logger.info(f"Catalog at {app.config['CATALOG_API_URL']}")

    serve(app, **options)


if __name__ == '__main__':
    main()
