"""JSON response envelope for the billing review portal.

Every API endpoint answers in the same shape:

    Success: {"success": true, "data": ..., "message": ...}
    Error:   {"success": false, "error": ...}

Patient records (anything with ``to_dict``) can be passed straight in as
``data``, alone or in a list.

Usage:
    from dashboard.utils.api_response import api_records, api_error

    @bp.route("/api/patients")
    def api_patients():
        try:
            return api_records(store.fetch_all())
        except StoreError as e:
            return api_error(e, 500)
"""

from flask import jsonify


def _serialize(data):
    if hasattr(data, "to_dict"):
        return data.to_dict()
    if isinstance(data, (list, tuple)):
        return [_serialize(item) for item in data]
    return data


def api_records(data=None, message=None):
    """Return a success envelope, serializing records via ``to_dict``."""
    body = {"success": True}
    if data is not None:
        body["data"] = _serialize(data)
    if message:
        body["message"] = message
    return jsonify(body)


def api_error(error, status_code=400):
    """Return an error envelope; ``error`` may be an exception or a message."""
    return jsonify({"success": False, "error": str(error)}), status_code
