"""
app.py
======

Flask application exposing the category-mixed product listing.

``/api/products/mixed`` fetches a large product pool from the upstream
catalog, mixes it so neighbouring products come from different categories
and returns one page of the result together with the page counts the
storefront's pagination control needs.

The product source is injectable: ``create_app(product_source=...)`` takes
any callable ``(seller_id) -> list[ProductRecord]``. By default it calls
``catalog.fetch_product_pool`` against ``CATALOG_API_URL``.

To run locally execute ``python app.py``; for production use
``start_server.py`` (waitress) or ``gunicorn -c gunicorn.conf.py app:app``.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Callable, List, Optional

from flask import Flask, g, jsonify, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from catalog import CatalogError, fetch_product_pool
from config import get_config
from listing import (
    InvalidArgument,
    ProductRecord,
    mix_products,
    showing_range,
    total_pages,
    validate_paging,
)
from monitor import PerformanceMonitor

ProductSource = Callable[[Optional[str]], List[ProductRecord]]


def create_app(config_name: str = None, product_source: ProductSource = None) -> Flask:
    """Factory to create and configure the Flask application instance."""
    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    logging.basicConfig(
        level=getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO),
        format=app.config['LOG_FORMAT'],
    )
    logger = logging.getLogger(__name__)

    limiter = Limiter(
        get_remote_address,
        app=app,
        default_limits=[
            f"{app.config['RATE_LIMIT_PER_HOUR']} per hour",
            f"{app.config['RATE_LIMIT_PER_MINUTE']} per minute",
        ],
    )
    monitor = PerformanceMonitor(enable_monitoring=app.config['ENABLE_METRICS'])
    app.extensions['performance_monitor'] = monitor

    if product_source is None:
        def product_source(seller_id: Optional[str]) -> List[ProductRecord]:
            return fetch_product_pool(
                app.config['CATALOG_API_URL'],
                app.config['CATALOG_POOL_SIZE'],
                seller_id,
                timeout=app.config['CATALOG_TIMEOUT'],
                max_retries=app.config['CATALOG_MAX_RETRIES'],
                delay=app.config['CATALOG_RETRY_DELAY'],
            )

    @app.route("/")
    def index():
        """Return a simple HTML landing page describing the API."""
        return (
            "<h1>Product Mix API</h1>"
            "<p>Category-mixed product listings for the storefront.</p>"
            "<h2>Endpoints:</h2>"
            "<ul>"
            "<li><code>/api/products/mixed?page=&lt;n&gt;&pageSize=&lt;size&gt;</code> - Mixed listing</li>"
            "<li><code>/api/products/mixed/page/&lt;n&gt;</code> - Same, page in the path</li>"
            "<li><code>/health</code> - Health check</li>"
            "<li><code>/metrics</code> - Request metrics</li>"
            "</ul>"
        )

    @app.route("/health")
    @limiter.exempt
    def health_check():
        """Health check endpoint for monitoring."""
        return jsonify({
            "status": "healthy",
            "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
            "environment": app.config['ENV_NAME'],
            "memory_usage": monitor.get_memory_usage(),
        }), 200

    @app.route("/metrics")
    @limiter.exempt
    def metrics():
        """Current request metrics and a one-hour summary."""
        monitor.collect_metrics()
        return jsonify({
            "current": monitor.get_current_metrics(),
            "summary": monitor.get_metrics_summary(),
        }), 200

    @app.route("/api/products/mixed")
    @app.route("/api/products/mixed/page/<int:page>")
    def api_mixed_products(page: int = None):
        """One page of the category-mixed product listing.

        Query parameters:
            page (int): Optional. 1-based page number. Defaults to 1.
            pageSize (int): Optional. One of ``PAGE_SIZE_CHOICES``.
            sellerId (str): Optional. Only list this seller's products.
            sellerName (str): Optional. Used for the listing title.

        Response:
            200 OK: ``title``, ``products``, ``pagination`` and ``showing``.
            400 Bad Request: Invalid page or page size.
            502 Bad Gateway: The upstream catalog could not be reached.
        """
        if page is None:
            page = request.args.get("page", default=1, type=int)
        page_size = request.args.get("pageSize", default=app.config['DEFAULT_PAGE_SIZE'], type=int)
        seller_id = request.args.get("sellerId", type=str) or None
        seller_name = request.args.get("sellerName", type=str) or None

        validate_paging(page, page_size)
        choices = app.config['PAGE_SIZE_CHOICES']
        if page_size not in choices:
            logger.warning(f"Rejected page size: {page_size}")
            return jsonify({
                "error": "Invalid page size",
                "message": f"pageSize must be one of {', '.join(str(c) for c in choices)}",
            }), 400

        products = product_source(seller_id)
        page_products = mix_products(products, page, page_size, app.config['CANONICAL_CATEGORIES'])
        total = len(products)
        first, last = showing_range(page, page_size, total)

        logger.info(f"Mixed listing page {page} (size {page_size}): {len(page_products)} of {total} products")

        return jsonify({
            "title": f"Products by {seller_name}" if seller_name else "All Products",
            "products": [product.to_dict() for product in page_products],
            "pagination": {
                "currentPage": page,
                "pageSize": page_size,
                "totalPages": total_pages(total, page_size),
                "total": total,
            },
            "showing": {"from": first, "to": last, "total": total},
        }), 200

    # Error handlers
    @app.errorhandler(InvalidArgument)
    def invalid_argument_handler(e):
        logger.warning(f"Invalid paging request: {e}")
        return jsonify({
            "error": "Invalid pagination parameters",
            "message": str(e)
        }), 400

    @app.errorhandler(CatalogError)
    def catalog_error_handler(e):
        logger.error(f"Catalog unavailable: {e}")
        return jsonify({
            "error": "Catalog unavailable",
            "message": str(e)
        }), 502

    @app.errorhandler(404)
    def not_found_handler(e):
        return jsonify({
            "error": "Not found",
            "message": "The requested endpoint was not found"
        }), 404

    @app.errorhandler(405)
    def method_not_allowed_handler(e):
        return jsonify({
            "error": "Method not allowed",
            "message": "The requested method is not allowed for this endpoint"
        }), 405

    @app.errorhandler(429)
    def ratelimit_handler(e):
        return jsonify({
            "error": "Rate limit exceeded",
            "message": str(e.description)
        }), 429

    @app.errorhandler(500)
    def internal_error_handler(e):
        logger.error(f"Internal server error: {e}")
        return jsonify({
            "error": "Internal server error",
            "message": "An unexpected error occurred"
        }), 500

    # Request logging middleware
    @app.before_request
    def log_request_info():
        g.start_time = time.time()
        logger.info(f"Request: {request.method} {request.path} from {request.remote_addr}")

    @app.after_request
    def log_response_info(response):
        elapsed = time.time() - g.get('start_time', time.time())
        monitor.record_request(elapsed, is_error=response.status_code >= 500)
        logger.info(f"Response: {response.status_code} for {request.method} {request.path} in {elapsed:.3f}s")
        return response

    return app


# Create the app instance
app = create_app()

if __name__ == "__main__":  # pragma: no cover
    port = app.config["SERVER_PORT"]
    debug = os.environ.get("FLASK_DEBUG", "False").lower() == "true"
    app.run(host="0.0.0.0", port=port, debug=debug)
