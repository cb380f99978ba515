from functools import wraps
from flask import request, g
from models import db
from models.user import User
from .responses import error
from .jwt import decode_token, TokenError


def _bearer_token():
    auth = request.headers.get("Authorization", "")
    if not auth:
        return None
    return auth.split(" ", 1)[1] if auth.startswith("Bearer ") else auth


def _load_identity(token):
    payload = decode_token(token, expected_type="access")
    g.user_id = payload["sub"]
    g.role = payload.get("role")
    request.user = db.session.get(User, g.user_id)


def auth_optional(func):
    """Attach the caller's identity when a token is sent; anonymous otherwise."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        g.user_id = None
        g.role = None
        request.user = None
        token = _bearer_token()
        if token:
            try:
                _load_identity(token)
            except TokenError as e:
                return error(str(e), status=401)
        return func(*args, **kwargs)

    return wrapper


def auth_required(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return error("Auth header missing", status=401)
        try:
            _load_identity(token)
        except TokenError as e:
            return error(str(e), status=401)
        if request.user is None:
            return error("Unknown user", status=401)
        return func(*args, **kwargs)

    return wrapper


def _to_set(obj):
    return set(obj) if isinstance(obj, (list, tuple, set)) else {obj}


def role_required(required):
    """Authorize based on the token role, or the stored admin flag."""
    required_set = _to_set(required)

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            role = getattr(g, "role", None)
            user = getattr(request, "user", None)
            if user is not None and getattr(user, "is_admin", False):
                role = "admin"
            if not role:
                return error("Role missing", status=403)
            if role not in required_set:
                return error("Forbidden", status=403)
            return fn(*args, **kwargs)

        return wrapper

    return decorator
