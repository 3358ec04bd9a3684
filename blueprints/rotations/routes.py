from __future__ import annotations

from flask import Blueprint, jsonify, request

from dao import rotations_dao
from domain.errors import ValidationError
from services import advance, clock, reassign, schedule_service

bp = Blueprint("rotations", __name__)

FILTERS = ("start_date", "end_date", "unit_id", "intern_id", "batch")


def _int_field(payload: dict, key: str) -> int:
    try:
        return int(payload[key])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValidationError(f"{key} must be a number") from exc


@bp.route("/api/rotations", methods=["GET"])
def list_rotations():
    filters = {key: request.args.get(key) for key in FILTERS if request.args.get(key)}
    return jsonify({"rotations": rotations_dao.list_rotations(filters)})


@bp.route("/api/rotations/current")
def current_rotations():
    today = clock.today()
    return jsonify({"date": today.isoformat(), "rotations": rotations_dao.list_rotations({"covering": today.isoformat()})})


@bp.route("/api/rotations", methods=["POST"])
def create_rotation():
    payload = request.get_json(force=True)
    rotation = schedule_service.create_manual_rotation(
        _int_field(payload, "intern_id"),
        _int_field(payload, "unit_id"),
        payload.get("start_date"),
        payload.get("end_date"),
    )
    return jsonify(rotation), 201


@bp.route("/api/rotations/<int:rotation_id>", methods=["PUT"])
def update_rotation(rotation_id: int):
    payload = request.get_json(force=True)
    return jsonify(schedule_service.update_rotation(rotation_id, payload))


@bp.route("/api/rotations/<int:rotation_id>", methods=["DELETE"])
def delete_rotation(rotation_id: int):
    schedule_service.delete_rotation(rotation_id)
    return jsonify({"deleted": rotation_id})


@bp.route("/api/rotations/<int:rotation_id>/reassign", methods=["POST"])
def reassign_rotation(rotation_id: int):
    payload = request.get_json(force=True)
    return jsonify(reassign.reassign_unit(rotation_id, _int_field(payload, "unit_id")))


@bp.route("/api/rotations/advance-all", methods=["POST"])
def advance_all():
    return jsonify(advance.advance_all().as_dict())


@bp.route("/api/rotations/generate", methods=["POST"])
def generate_all():
    payload = request.get_json(silent=True) or {}
    start = payload.get("start_date") or clock.today().isoformat()
    return jsonify(advance.generate_all(start).as_dict())
