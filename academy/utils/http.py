from flask import jsonify, request


def json_body():
    """Request JSON as a dict; an absent or non-object body reads as empty."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def json_error(message, status, error=None):
    payload = {"success": False, "message": message}
    if error is not None:
        payload["error"] = str(error)
    return jsonify(payload), status
