"""Per-visitor cart session keys."""
import uuid
from flask import request, g, current_app

SESSION_HEADER = "X-Session-ID"
MAX_KEY_LENGTH = 100


def _clean(value):
    if value is None:
        return None
    value = str(value).strip()[:MAX_KEY_LENGTH]
    return value or None


def resolve_session_key(create: bool = False):
    """
    Find the caller's cart session: header, then JSON body or query string,
    then cookie. With ``create`` a fresh random key is issued when none is sent.
    """
    key = _clean(request.headers.get(SESSION_HEADER))
    if not key:
        body = request.get_json(silent=True)
        if isinstance(body, dict):
            key = _clean(body.get("session_id"))
    if not key:
        key = _clean(request.args.get("session_id"))
    if not key:
        key = _clean(request.cookies.get(current_app.config["CART_SESSION_COOKIE"]))
    if not key and create:
        key = uuid.uuid4().hex
        g.issued_session_key = key
    g.session_key = key
    return key


def register_session_hooks(app):
    @app.before_request
    def _reset_session_key():
        g.session_key = None
        g.issued_session_key = None

    @app.after_request
    def _emit_session_key(resp):
        key = getattr(g, "session_key", None)
        if key:
            resp.headers[SESSION_HEADER] = key
        issued = getattr(g, "issued_session_key", None)
        if issued:
            resp.set_cookie(
                app.config["CART_SESSION_COOKIE"],
                issued,
                max_age=app.config.get("CART_SESSION_MAX_AGE"),
                httponly=True,
                samesite="Lax",
                secure=app.config.get("CART_SESSION_SECURE", False),
            )
        return resp
