"""Request validation decorator.

@validate_request parses the JSON body into the Pydantic model named by the
view function's annotation and passes it in. Path parameters (anything in
request.view_args) are passed through unchanged.

    @auth_bp.post("/auth/register")
    @validate_request
    def register(data: SignupRequest):
        ...

Validation failures raise ValidationError with details:
- model: Name of the schema that rejected the body
- received: The submitted body, with password fields redacted
- errors: One entry per failing field (field, message, expected_type)
"""

import inspect
from functools import wraps

import pydantic
from flask import request

from ..exceptions import ValidationError

REDACTED = "***"


def _redact(body):
    """Mask values of any key that looks like a password."""
    if not isinstance(body, dict):
        return body
    return {
        key: REDACTED if "password" in str(key).lower() else value
        for key, value in body.items()
    }


def _format_errors(exc: pydantic.ValidationError) -> list[dict]:
    return [
        {
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "expected_type": err["type"],
        }
        for err in exc.errors()
    ]


def validate_request(f):
    """
    Decorator that validates the request body against the view's annotation.

    Raises:
        TypeError: At decoration time if the view has no parameters or its
            first parameter is unannotated; at request time if a body
            parameter is not annotated with a BaseModel subclass
        ValidationError: If the body is not a JSON object or fails validation
    """
    signature = inspect.signature(f)
    params = list(signature.parameters.values())

    if not params:
        raise TypeError(f"{f.__name__} has no parameters to validate")
    if params[0].annotation is inspect.Parameter.empty:
        raise TypeError(f"First parameter '{params[0].name}' of {f.__name__} lacks a type annotation")

    @wraps(f)
    def wrapper(*args, **kwargs):
        view_args = request.view_args or {}

        for param in params:
            if param.name in view_args or param.name in kwargs:
                continue

            model = param.annotation
            if not (inspect.isclass(model) and issubclass(model, pydantic.BaseModel)):
                raise TypeError(
                    f"Parameter '{param.name}' of {f.__name__} must be annotated "
                    f"with a Pydantic BaseModel subclass"
                )

            body = request.get_json(silent=True)
            if not isinstance(body, dict):
                raise ValidationError(
                    "Request body must be a JSON object",
                    {"model": model.__name__}
                )

            try:
                kwargs[param.name] = model.model_validate(body)
            except pydantic.ValidationError as e:
                raise ValidationError(
                    "Invalid request data",
                    {
                        "model": model.__name__,
                        "received": _redact(body),
                        "errors": _format_errors(e),
                    }
                )

        return f(*args, **kwargs)

    return wrapper
