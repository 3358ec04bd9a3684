from __future__ import annotations

from flask import Blueprint, jsonify, request

from dao import settings_dao
from domain.errors import NotFoundError

bp = Blueprint("settings", __name__)


@bp.route("/api/settings", methods=["GET"])
def get_settings():
    return jsonify(settings_dao.get_settings())


@bp.route("/api/settings/<key>", methods=["GET"])
def get_setting(key: str):
    value = settings_dao.get_setting(key)
    if value is None:
        raise NotFoundError(f"Setting {key!r} not found")
    return jsonify({"key": key, "value": value})


@bp.route("/api/settings/<key>", methods=["PUT"])
def save_setting(key: str):
    payload = request.get_json(force=True)
    settings_dao.save_setting(key, payload.get("value"), payload.get("description", ""))
    return jsonify({"ok": True})
