"""
Validation routes — values checks and wiring expectations.

Blueprint: validate_bp
Prefix: /api

Endpoints:
    GET  /health     — liveness and version
    GET  /rules      — active rule set
    POST /validate   — validate a values payload
    POST /env        — expected env references for a workload
"""

from __future__ import annotations

import logging
from pathlib import Path

from flask import Blueprint, current_app, jsonify, request

from src import __version__
from src.core.config.loader import ConfigError, flatten_values, merge_values, parse_set_values
from src.core.config.rules_loader import resolve_rule_set
from src.core.models.rules import RuleSet
from src.core.services import env_refs
from src.core.services.values_validate import validate

logger = logging.getLogger(__name__)

validate_bp = Blueprint("validate", __name__)


def _rule_set() -> RuleSet:
    path = current_app.config.get("RULES_PATH")
    return resolve_rule_set(Path(path) if path else None, current_app.config.get("RULESET_NAME"))


def _payload_config() -> dict:
    """Flat configuration from ``{"values": {...}, "set": [...]}``.

    Raises:
        ConfigError: On a malformed payload.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ConfigError("Expected a JSON object body")

    values = data.get("values") or {}
    assignments = data.get("set") or []
    if not isinstance(values, dict):
        raise ConfigError("'values' must be an object")
    if not isinstance(assignments, list) or not all(isinstance(a, str) for a in assignments):
        raise ConfigError("'set' must be a list of key=value strings")

    merged = merge_values(merge_values({}, values), parse_set_values(assignments))
    return flatten_values(merged)


@validate_bp.route("/health")
def health():  # type: ignore[no-untyped-def]
    """Liveness probe."""
    return jsonify({"status": "ok", "version": __version__})


@validate_bp.route("/rules")
def rules():  # type: ignore[no-untyped-def]
    """Active rule set."""
    try:
        rule_set = _rule_set()
    except ConfigError as e:
        return jsonify({"error": str(e)}), 500
    return jsonify(rule_set.model_dump(mode="json"))


@validate_bp.route("/validate", methods=["POST"])
def validate_values():  # type: ignore[no-untyped-def]
    """Validate values; 422 with the violation list when invalid."""
    try:
        rule_set = _rule_set()
    except ConfigError as e:
        return jsonify({"valid": False, "violations": [], "errors": [str(e)]}), 500

    try:
        config = _payload_config()
    except ConfigError as e:
        return jsonify({"valid": False, "violations": [], "errors": [str(e)]}), 400

    result = validate(config, rule_set)
    body = {**result.to_dict(), "rule_set": rule_set.name, "errors": []}
    if not result.valid:
        logger.info("Rejected values: %d violation(s)", len(result.messages))
        return jsonify(body), 422
    return jsonify(body)


@validate_bp.route("/env", methods=["POST"])
def env_expected():  # type: ignore[no-untyped-def]
    """Expected env references for ``component`` given the posted values."""
    try:
        config = _payload_config()
    except ConfigError as e:
        return jsonify({"error": str(e)}), 400

    data = request.get_json(silent=True) or {}
    component = str(data.get("component") or "server")
    release = str(data.get("release") or env_refs.DEFAULT_RELEASE)

    try:
        refs = env_refs.expected_env_refs(config, component, release)
        image = env_refs.expected_readiness_image(config, component)
    except KeyError as e:
        return jsonify({"error": e.args[0]}), 404

    return jsonify({
        "component": component,
        "release": release,
        "env": {var: ref.to_dict() for var, ref in refs.items()},
        "readiness_image": image or None,
    })
