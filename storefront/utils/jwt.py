"""Bearer access tokens for customers and back-office staff."""
import datetime as dt
from typing import Dict
import jwt
from flask import current_app

ALGORITHM = "HS256"
ROLES = ("customer", "admin")


class TokenError(Exception):
    pass


def create_access_token(user_id, role: str = "customer") -> str:
    if role not in ROLES:
        raise ValueError(f"unknown role: {role}")
    cfg = current_app.config
    issued = dt.datetime.now(dt.timezone.utc)
    payload: Dict = {
        # PyJWT requires a string subject
        "sub": str(user_id),
        "role": role,
        "type": "access",
        "iat": issued,
        "exp": issued + dt.timedelta(minutes=cfg["ACCESS_TOKEN_LIFETIME_MIN"]),
    }
    return jwt.encode(payload, cfg["JWT_SECRET"], algorithm=ALGORITHM)


def decode_token(token: str, expected_type: str = "access") -> Dict:
    """Verify signature, expiry and token type; ``sub`` comes back as the integer user id."""
    try:
        data = jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("token expired")
    except jwt.InvalidTokenError:
        raise TokenError("invalid token")

    if data.get("type") != expected_type:
        raise TokenError(f"expected {expected_type} token")
    try:
        data["sub"] = int(data["sub"])
    except (TypeError, ValueError):
        raise TokenError("invalid token subject")
    return data
