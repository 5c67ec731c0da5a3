"""
Routes package for the marketplace JSON API
"""

from marketplace.logger import get_logger

logger = get_logger("marketplace.routes")


def init_app(app):
    """Register all route blueprints with the Flask app"""
    logger.debug("Initializing route blueprints")

    from . import orders, items

    app.register_blueprint(orders.bp)
    app.register_blueprint(items.bp)

    logger.info("Registered order and item blueprints")
