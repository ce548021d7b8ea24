from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Callable

from flask import g, jsonify, request

from ..common.http import bearer_token, error_response
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, DomainError
from .model import User
from .service import AuthService


@dataclass(frozen=True)
class Guards:
    token_required: Callable
    admin_required: Callable
    student_required: Callable


def current_user() -> User:
    return g.current_user


def make_guards(auth_service: AuthService) -> Guards:
    def token_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            token = bearer_token(request.headers.get("Authorization"))
            if not token:
                return jsonify({"success": False, "message": "Not authorized, no token"}), 401
            try:
                g.current_user = auth_service.resolve_token(token)
            except AuthenticationError as e:
                return jsonify({"success": False, "message": str(e)}), 401
            except DomainError as e:
                return error_response(e)
            return view(*args, **kwargs)

        return wrapper

    def _role_required(*roles: Role):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                if g.current_user.role not in roles:
                    return jsonify({"success": False, "message": "Access denied"}), 403
                return view(*args, **kwargs)

            return token_required(wrapper)

        return decorator

    return Guards(
        token_required=token_required,
        admin_required=_role_required(Role.ADMIN),
        # Admins may use student routes (preview/testing), as before.
        student_required=_role_required(Role.STUDENT, Role.ADMIN),
    )
