from flask import request

from utils.errors import ValidationError


def parse_body(schema):
    """Validate the JSON body against a pydantic schema.

    pydantic's ValidationError bubbles up to the app-level handler which turns
    it into a 400 naming each failing field.
    """
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return schema.model_validate(data)


def parse_form(schema):
    return schema.model_validate(request.form.to_dict())


def pydantic_errors(exc):
    """Flatten a pydantic ValidationError into {field: message}."""
    fields = {}
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "body"
        fields[loc] = err.get("msg", "invalid value")
    return fields
