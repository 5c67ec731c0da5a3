from flask import jsonify, request
from flask_login import current_user

from marketplace.business.core.identity import RequestIdentity
from marketplace.business.core.outcomes import Forbidden, Outcome, ValidationError


def request_identity() -> RequestIdentity:
    return RequestIdentity.from_user(current_user)


def request_payload():
    """
    JSON object body, falling back to form fields when no JSON was sent.

    Returns:
        tuple: (dict, None) or (None, failed Outcome) when the body is not an object
    """
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
    if not isinstance(data, dict):
        return None, Outcome.failure(ValidationError("The request body must be a JSON object."))
    return data, None


def respond(outcome: Outcome, success_status: int = 200, body=None):
    payload, status = outcome.to_response(success_status=success_status, body=body)
    return jsonify(payload), status


def forbidden(message: str):
    return respond(Outcome.failure(Forbidden(message)))
