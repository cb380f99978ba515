from functools import wraps
from flask import request
from pydantic import ValidationError
from storefront.services.errors import ValidationFailed


def _first_field(errors) -> str:
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p != "__root__"]
        if loc:
            return ".".join(loc)
    return None


def validate_schema(schema):
    """Decorator to validate request JSON against a Pydantic schema."""

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            payload = request.get_json(silent=True)
            if payload is None:
                payload = {}
            if not isinstance(payload, dict):
                raise ValidationFailed("Request body must be a JSON object")
            try:
                obj = schema(**payload)
            except ValidationError as ve:
                errors = [
                    {"field": ".".join(str(p) for p in e["loc"]), "message": e["msg"]}
                    for e in ve.errors()
                ]
                field = _first_field(ve.errors())
                raise ValidationFailed(
                    f"Invalid value for {field}" if field else "Invalid request",
                    field=field,
                    errors=errors,
                )
            request.validated_data = obj
            return fn(*args, **kwargs)
        return wrapper

    return decorator
