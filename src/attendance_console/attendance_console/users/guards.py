"""Session guards for JSON endpoints.

Login stores the account's role and scope in the Flask session; these
decorators answer 401/403 as JSON instead of redirecting.
"""

from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import session

from ..access.model import AccessScope
from ..common.http import fail
from ..core.enums import Role, ScopeType
from ..core.exceptions import AuthenticationError


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Please log in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {Role(r).value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return fail("Please log in to continue", 401)
            if session.get("role") not in allowed:
                return fail("You do not have permission to perform this action", 403)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_user_id() -> int:
    if "user_id" not in session:
        raise AuthenticationError("Please log in to continue")
    return int(session["user_id"])


def current_role() -> Role:
    if "role" not in session:
        raise AuthenticationError("Please log in to continue")
    return Role(session["role"])


def current_scope() -> AccessScope:
    scope_type: Optional[str] = session.get("scope_type")
    return AccessScope(
        role=current_role(),
        scope_type=ScopeType(scope_type) if scope_type else None,
        scope_id=session.get("scope_id"),
        student_db_id=session.get("student_db_id"),
        user_id=current_user_id(),
    )
