from __future__ import annotations

from functools import wraps

from flask import g, request

from ..core.enums import Role
from .credentials import Credential
from .gate import AccessGate, bearer_token


def role_required(gate: AccessGate, *roles: Role):
    """Flask view decorator: verify the bearer credential and check its role.

    An empty role list admits any authenticated caller. The verified credential
    is exposed to the view as `flask.g.credential`.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            token = bearer_token(request.headers.get("Authorization"))
            g.credential = gate.authorize(token, roles)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_credential() -> Credential:
    return g.credential
