from flask import jsonify, request

from .errors import http_status_for


def request_payload(**overrides):
    """Payload da operação: query string no GET, JSON (ou form) nos demais."""
    if request.method == "GET":
        payload = request.args.to_dict()
    elif request.is_json:
        payload = request.get_json(silent=True)
    else:
        payload = request.form.to_dict()

    if overrides:
        if payload is None:
            payload = {}
        if isinstance(payload, dict):
            payload.update(overrides)
    return payload


def respond(result: dict):
    return jsonify(result), http_status_for(result)


def call(operation, **overrides):
    return respond(operation(request_payload(**overrides)))
