"""
Garden API Module
=================

- crud.py: plant listing, add, edit, water, delete
- status.py: backend mode, stats, current notification
- care.py: species care advice
"""

from flask import Blueprint

from app.utils.http import error_response

# Create blueprint here to avoid circular imports
garden_api = Blueprint("garden_api", __name__)


@garden_api.errorhandler(404)
def not_found(error):
    return error_response("Resource not found", 404)


@garden_api.errorhandler(405)
def method_not_allowed(error):
    return error_response("Method not allowed", 405)


# Import submodules to register routes (must be after blueprint creation)
from . import care, crud, status  # noqa: E402

__all__ = ["garden_api"]
