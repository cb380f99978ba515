from .responses import ok, error
from .auth import auth_optional, auth_required, role_required
from .validation import validate_schema
from .db import transactional
from .jwt import (
    create_access_token,
    decode_token,
    TokenError,
)
from .session import resolve_session_key, register_session_hooks

__all__ = [
    'ok',
    'error',
    'auth_optional',
    'auth_required',
    'role_required',
    'create_access_token',
    'decode_token',
    'TokenError',
    'validate_schema',
    'transactional',
    'resolve_session_key',
    'register_session_hooks',
]
