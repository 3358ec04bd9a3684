from __future__ import annotations

from dataclasses import asdict

from flask import Blueprint, jsonify, request

from dao import rotations_dao, units_dao
from domain.errors import ConflictError, NotFoundError, ValidationError
from domain.models import WORKLOADS
from services import clock

bp = Blueprint("units", __name__)


def _clean(payload: dict) -> dict:
    name = str(payload.get("name") or "").strip()
    if not name:
        raise ValidationError("Unit name is required")
    try:
        duration = int(payload.get("duration_days"))
    except (TypeError, ValueError) as exc:
        raise ValidationError("duration_days must be a positive integer") from exc
    if duration <= 0:
        raise ValidationError("duration_days must be a positive integer")
    workload = payload.get("workload", "Medium")
    if workload not in WORKLOADS:
        raise ValidationError("workload must be Low, Medium or High")
    return {
        "name": name,
        "duration_days": duration,
        "workload": workload,
        "position": payload.get("position"),
        "description": payload.get("description"),
    }


def _check_name_free(name: str, unit_id: int | None = None) -> None:
    existing = units_dao.get_unit_by_name(name)
    if existing is not None and existing.id != unit_id:
        raise ConflictError(f"Unit {name!r} already exists")


@bp.route("/api/units", methods=["GET"])
def list_units():
    return jsonify({"units": [asdict(unit) for unit in units_dao.list_units()]})


@bp.route("/api/units/<int:unit_id>", methods=["GET"])
def get_unit(unit_id: int):
    unit = units_dao.get_unit(unit_id)
    if unit is None:
        raise NotFoundError(f"Unit {unit_id} not found")
    return jsonify(asdict(unit))


@bp.route("/api/units", methods=["POST"])
def create_unit():
    data = _clean(request.get_json(force=True))
    _check_name_free(data["name"])
    unit_id = units_dao.create_unit(data)
    return jsonify({"id": unit_id}), 201


@bp.route("/api/units/<int:unit_id>", methods=["PUT"])
def update_unit(unit_id: int):
    data = _clean(request.get_json(force=True))
    _check_name_free(data["name"], unit_id)
    if not units_dao.update_unit(unit_id, data):
        raise NotFoundError(f"Unit {unit_id} not found")
    return jsonify({"updated": unit_id})


@bp.route("/api/units/reorder", methods=["POST"])
def reorder_units():
    payload = request.get_json(force=True)
    ordered = [int(unit_id) for unit_id in payload.get("positions", [])]
    known = {unit.id for unit in units_dao.list_units()}
    missing = [unit_id for unit_id in ordered if unit_id not in known]
    if missing:
        raise NotFoundError(f"Unknown units: {missing}")
    units_dao.set_positions(ordered)
    return jsonify({"units": [asdict(unit) for unit in units_dao.list_units()]})


@bp.route("/api/units/<int:unit_id>", methods=["DELETE"])
def delete_unit(unit_id: int):
    if rotations_dao.count_active_for_unit(unit_id, clock.today()):
        raise ConflictError("Cannot delete unit with current or upcoming rotations")
    if not units_dao.delete_unit(unit_id):
        raise NotFoundError(f"Unit {unit_id} not found")
    return jsonify({"deleted": unit_id})
