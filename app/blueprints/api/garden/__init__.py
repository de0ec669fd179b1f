"""
Garden API Module
=================

Garden planner API organized by concern:
- gardens.py: Garden and row CRUD
- layout.py: Row layout, fit checks and add / remove / move of plant instances
- plants.py: Plant catalogue CRUD
"""

from flask import Blueprint

from app.utils.http import error_response

# Create blueprint here to avoid circular imports
garden_api = Blueprint("garden_api", __name__)


# Error handlers
@garden_api.errorhandler(404)
def not_found(error):
    """Handle 404 errors"""
    return error_response("Resource not found", 404)


@garden_api.errorhandler(405)
def method_not_allowed(error):
    """Handle 405 errors"""
    return error_response("Method not allowed", 405)


@garden_api.errorhandler(500)
def internal_error(error):
    """Handle 500 errors"""
    return error_response("Internal server error", 500)


# Import submodules to register routes (must be after blueprint creation)
from . import gardens, layout, plants  # noqa: E402

__all__ = ["garden_api"]
