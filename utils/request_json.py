from flask import request

from dao.errors import ValidationError


def json_body() -> dict:
    body = request.get_json(silent=True)
    if body is None:
        raise ValidationError("Invalid JSON in request body")
    if not isinstance(body, dict):
        raise ValidationError("Invalid request body - must be an object")
    return body
