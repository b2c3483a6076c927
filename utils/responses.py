"""JSON envelope shared by every endpoint: {success, message, data | errors}."""
import math

from flask import jsonify


def ok(message="OK", data=None, code=200, **extra):
    payload = {"success": True, "message": message, "data": data}
    payload.update(extra)
    return jsonify(payload), code


def fail(message="Bad Request", code=400, errors=None, **extra):
    payload = {"success": False, "message": message}
    if errors:
        payload["errors"] = errors
    payload.update(extra)
    return jsonify(payload), code


def from_error(err):
    """Envelope for an ApiError raised anywhere below a view."""
    return fail(err.message, err.status_code, errors=err.errors)


def pagination(page, limit, total):
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if total else 0,
    }
