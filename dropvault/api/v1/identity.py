"""
Caller Identity

Authentication happens upstream. The gateway forwards the authenticated
user in request headers; this module turns them into an Owner.
"""

from functools import wraps
from typing import Optional

from flask import current_app, g, request

from dropvault.domain.errors import ErrorCategory, create_error_response
from dropvault.domain.identity import Owner

DEFAULT_USER_HEADER = "X-User-Id"
DEFAULT_NAME_HEADER = "X-User-Name"


def current_owner() -> Optional[Owner]:
    """Owner for the current request, or None for anonymous callers."""
    user_header = current_app.config.get("IDENTITY_USER_HEADER", DEFAULT_USER_HEADER)
    name_header = current_app.config.get("IDENTITY_NAME_HEADER", DEFAULT_NAME_HEADER)

    user_id = (request.headers.get(user_header) or "").strip()
    if not user_id:
        return None
    username = (request.headers.get(name_header) or "").strip() or None
    return Owner(user_id, username)


def require_identity(f):
    """
    Decorator for routes that need a signed-in caller.

    Stores the Owner on flask.g.owner, or answers 401 without calling
    the route.
    """

    @wraps(f)
    def decorated_function(*args, **kwargs):
        owner = current_owner()
        if owner is None:
            return create_error_response(
                ErrorCategory.AUTHENTICATION_REQUIRED,
                f"Missing identity header on {request.path}",
                status_code=401,
            )
        g.owner = owner
        return f(*args, **kwargs)

    return decorated_function
