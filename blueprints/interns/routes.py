from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from domain.errors import ValidationError
from services import advance, extension, schedule_service
from services.schedule_service import rotation_dict

bp = Blueprint("interns", __name__)


def _optional_int(payload: dict, key: str) -> int | None:
    value = payload.get(key)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{key} must be a number") from exc


@bp.route("/api/interns", methods=["GET"])
def list_interns():
    interns = schedule_service.list_interns(
        batch=request.args.get("batch"), status=request.args.get("status")
    )
    return jsonify({"interns": interns})


@bp.route("/api/interns", methods=["POST"])
def create_intern():
    payload = request.get_json(force=True)
    return jsonify(schedule_service.create_intern(payload)), 201


@bp.route("/api/interns/<int:intern_id>", methods=["GET"])
def get_intern(intern_id: int):
    return jsonify(schedule_service.get_intern(intern_id))


@bp.route("/api/interns/<int:intern_id>", methods=["PUT"])
def update_intern(intern_id: int):
    payload = request.get_json(force=True)
    return jsonify(schedule_service.update_intern(intern_id, payload))


@bp.route("/api/interns/<int:intern_id>", methods=["DELETE"])
def delete_intern(intern_id: int):
    schedule_service.delete_intern(intern_id)
    return jsonify({"deleted": intern_id})


@bp.route("/api/interns/<int:intern_id>/schedule")
def intern_schedule(intern_id: int):
    if current_app.config.get("AUTO_ROTATION", True):
        advance.seed_or_advance(intern_id)
    return jsonify(schedule_service.build_intern_schedule(intern_id))


@bp.route("/api/interns/<int:intern_id>/status")
def intern_status(intern_id: int):
    return jsonify({"id": intern_id, "status": schedule_service.resolve_status(intern_id)})


@bp.route("/api/interns/<int:intern_id>/advance", methods=["POST"])
def advance_intern(intern_id: int):
    return jsonify(advance.seed_or_advance(intern_id))


@bp.route("/api/interns/<int:intern_id>/generate", methods=["POST"])
def generate_intern(intern_id: int):
    payload = request.get_json(silent=True) or {}
    rotations = advance.generate_for_new_intern(intern_id, payload.get("start_date"))
    return jsonify({"rotations": [rotation_dict(r) for r in rotations]}), 201


@bp.route("/api/interns/<int:intern_id>/extend", methods=["POST"])
def extend_intern(intern_id: int):
    payload = request.get_json(force=True)
    result = extension.apply_extension(
        intern_id,
        payload.get("extension_days"),
        reason=payload.get("reason", "other"),
        notes=payload.get("notes"),
        unit_id=_optional_int(payload, "unit_id"),
        grace_days=current_app.config.get("EXTENSION_GRACE_DAYS"),
    )
    return jsonify(
        {
            "delta": result.delta,
            "status": result.status,
            "shifted": result.shifted,
            "resized_rotation": rotation_dict(result.resized_rotation) if result.resized_rotation else None,
            "warning": result.warning,
        }
    )
