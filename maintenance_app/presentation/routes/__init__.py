"""
Routes package for the maintenance service
Every blueprint is a thin JSON layer over the business managers, mounted under /api
"""

from maintenance_app.logger import get_logger

logger = get_logger("maintenance_app.routes")

API_PREFIX = '/api'


def init_app(app):
    """Initialize all route blueprints with the Flask app"""
    logger.debug("Initializing route blueprints")

    from . import administration, ai, dashboards, equipment, inventory, maintenance

    app.register_blueprint(equipment.bp, url_prefix=API_PREFIX)
    app.register_blueprint(maintenance.bp, url_prefix=API_PREFIX)
    app.register_blueprint(administration.bp, url_prefix=API_PREFIX)
    app.register_blueprint(inventory.bp, url_prefix=API_PREFIX)
    app.register_blueprint(dashboards.bp, url_prefix=API_PREFIX)
    app.register_blueprint(ai.bp, url_prefix=f'{API_PREFIX}/ai')

    logger.info("Registered API blueprints")
