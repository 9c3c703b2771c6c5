# --- stitchbook/utils/api.py ---
from flask import jsonify


def api_error(message, data=None):
    return {
        "error": message,
        **(data or {}),
    }


def api_response(payload, status=200, headers=None):
    resp = jsonify(payload)
    resp.status_code = status
    for key, value in (headers or {}).items():
        resp.headers[key] = value
    return resp
