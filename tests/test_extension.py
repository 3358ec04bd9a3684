from __future__ import annotations

from datetime import date

import pytest

from dao import extensions_dao, interns_dao, rotations_dao
from domain.errors import NotFoundError, ValidationError
from domain.models import STATUS_ACTIVE, STATUS_EXTENDED
from services import db, extension

from conftest import add_intern, add_rotation, add_units

TODAY = date(2024, 3, 5)


@pytest.fixture()
def roster(ctx):
    """One intern in unit C (Mar 1-10) followed by unit A (Mar 11-20)."""
    a, b, c = add_units([10, 10, 10], names=["A", "B", "C"])
    intern_id = add_intern(start=date(2024, 1, 1))
    current = add_rotation(intern_id, c, date(2024, 3, 1), date(2024, 3, 10))
    following = add_rotation(intern_id, a, date(2024, 3, 11), date(2024, 3, 20))
    return {"intern": intern_id, "units": (a, b, c), "current": current, "following": following}


def _dates(rotation_id):
    rotation = rotations_dao.get_rotation(rotation_id)
    return rotation.start_date, rotation.end_date


def test_extension_resizes_target_and_shifts_following(roster):
    _, _, c = roster["units"]
    result = extension.apply_extension(roster["intern"], 5, reason="leave", unit_id=c.id, today=TODAY)

    assert result.delta == 5
    assert result.status == STATUS_EXTENDED
    assert result.shifted == 1
    assert _dates(roster["current"]) == (date(2024, 3, 1), date(2024, 3, 15))
    assert rotations_dao.get_rotation(roster["current"]).is_manual_assignment is True
    assert _dates(roster["following"]) == (date(2024, 3, 16), date(2024, 3, 25))

    intern = interns_dao.get_intern(roster["intern"])
    assert (intern.extension_days, intern.status) == (5, STATUS_EXTENDED)
    (reason,) = extensions_dao.list_for_intern(roster["intern"])
    assert (reason.extension_days, reason.reason) == (5, "leave")


def test_extend_then_reset_restores_dates(roster):
    before = [_dates(roster["current"]), _dates(roster["following"])]

    extension.apply_extension(roster["intern"], 5, today=TODAY)
    result = extension.apply_extension(roster["intern"], 0, today=TODAY)

    assert result.delta == -5
    assert result.status == STATUS_ACTIVE
    assert [_dates(roster["current"]), _dates(roster["following"])] == before
    assert [r.extension_days for r in extensions_dao.list_for_intern(roster["intern"])] == [5, -5]


def test_unchanged_total_records_nothing(roster):
    result = extension.apply_extension(roster["intern"], 0, today=TODAY)
    assert result.delta == 0
    assert extensions_dao.list_for_intern(roster["intern"]) == []


def test_recently_ended_rotation_within_grace_window(roster):
    later = date(2024, 3, 24)
    extension.apply_extension(roster["intern"], 2, today=later)
    assert _dates(roster["following"]) == (date(2024, 3, 11), date(2024, 3, 22))


def test_missing_target_only_warns(roster):
    result = extension.apply_extension(roster["intern"], 3, today=date(2024, 6, 1))

    assert result.warning
    assert result.resized_rotation is None
    assert _dates(roster["current"]) == (date(2024, 3, 1), date(2024, 3, 10))
    assert interns_dao.get_intern(roster["intern"]).extension_days == 3


def test_unit_without_rotation_only_warns(roster):
    _, b, _ = roster["units"]
    result = extension.apply_extension(roster["intern"], 3, unit_id=b.id, today=TODAY)
    assert result.warning
    assert _dates(roster["following"]) == (date(2024, 3, 11), date(2024, 3, 20))


def test_reduction_past_start_is_rejected(roster):
    extension.apply_extension(roster["intern"], 20, today=TODAY)
    interns_dao.set_extension(roster["intern"], 40, STATUS_EXTENDED)

    with pytest.raises(ValidationError):
        extension.apply_extension(roster["intern"], 0, today=TODAY)
    assert interns_dao.get_intern(roster["intern"]).extension_days == 40


@pytest.mark.parametrize("days, reason", [(-1, "other"), (366, "other"), ("ten", "other"), (3, "holiday")])
def test_invalid_input(roster, days, reason):
    with pytest.raises(ValidationError):
        extension.apply_extension(roster["intern"], days, reason=reason, today=TODAY)


def test_unknown_intern(roster):
    with pytest.raises(NotFoundError):
        extension.apply_extension(9999, 3, today=TODAY)


def test_failed_shift_is_retried_then_skipped(roster, monkeypatch):
    a, b, c = roster["units"]
    last = add_rotation(roster["intern"], b, date(2024, 3, 21), date(2024, 3, 30))
    original = rotations_dao.update_dates
    calls = []

    def flaky_update(rotation_id, start, end, **kwargs):
        if rotation_id == roster["following"]:
            calls.append(rotation_id)
            raise db.DatabaseError("database is locked")
        return original(rotation_id, start, end, **kwargs)

    monkeypatch.setattr(rotations_dao, "update_dates", flaky_update)

    result = extension.apply_extension(roster["intern"], 5, reason="leave", unit_id=c.id, today=TODAY)

    assert len(calls) == 2
    assert result.shifted == 1
    assert _dates(roster["current"]) == (date(2024, 3, 1), date(2024, 3, 15))
    assert _dates(roster["following"]) == (date(2024, 3, 11), date(2024, 3, 20))
    assert _dates(last) == (date(2024, 3, 26), date(2024, 4, 4))
    assert [r.extension_days for r in extensions_dao.list_for_intern(roster["intern"])] == [5]
    assert interns_dao.get_intern(roster["intern"]).extension_days == 5
