from __future__ import annotations

from collections import Counter
from datetime import date

import pytest

from dao import rotations_dao
from domain.errors import NotFoundError
from services.reassign import reassign_unit

from conftest import add_intern, add_rotation, add_units


@pytest.fixture()
def schedule(ctx):
    units = add_units([2, 2, 2, 2])
    intern_id = add_intern()
    rotation_ids = [
        add_rotation(intern_id, units[i], date(2024, 1, 1 + 2 * i), date(2024, 1, 2 + 2 * i)) for i in range(3)
    ]
    return intern_id, units, rotation_ids


def _snapshot(intern_id):
    return {r.id: (r.unit_id, r.start_date, r.end_date) for r in rotations_dao.timeline_for(intern_id)}


def test_swap_with_later_holder_keeps_dates(schedule):
    intern_id, units, (r0, r1, r2) = schedule
    before = _snapshot(intern_id)

    result = reassign_unit(r0, units[2].id)

    after = _snapshot(intern_id)
    assert result["swapped_with"] == r2
    assert after[r0][0] == units[2].id
    assert after[r2][0] == units[0].id
    assert {k: v[1:] for k, v in after.items()} == {k: v[1:] for k, v in before.items()}
    assert Counter(v[0] for v in after.values()) == Counter(v[0] for v in before.values())


def test_unit_not_ahead_goes_to_first_later_rotation(schedule):
    intern_id, units, (r0, r1, r2) = schedule
    result = reassign_unit(r0, units[3].id)

    after = _snapshot(intern_id)
    assert result["swapped_with"] == r1
    assert [after[r][0] for r in (r0, r1, r2)] == [units[3].id, units[0].id, units[2].id]


def test_last_rotation_appends_old_unit(schedule):
    intern_id, units, (r0, r1, r2) = schedule
    result = reassign_unit(r2, units[0].id)

    created = rotations_dao.get_rotation(result["created"])
    assert result["swapped_with"] is None
    assert rotations_dao.get_rotation(r2).unit_id == units[0].id
    assert (created.unit_id, created.start_date, created.end_date) == (units[2].id, date(2024, 1, 7), date(2024, 1, 8))
    assert created.is_manual_assignment is False


def test_later_duplicates_are_removed(schedule):
    intern_id, units, (r0, r1, r2) = schedule
    extra = add_rotation(intern_id, units[1], date(2024, 1, 9), date(2024, 1, 10))

    result = reassign_unit(r1, units[2].id)

    assert result["swapped_with"] == r2
    assert result["removed"] == 1
    assert rotations_dao.get_rotation(extra) is None


def test_same_unit_is_a_no_op(schedule):
    intern_id, units, (r0, _, _) = schedule
    before = _snapshot(intern_id)
    assert reassign_unit(r0, units[0].id) == {"swapped_with": None, "created": None, "removed": 0}
    assert _snapshot(intern_id) == before


def test_unknown_rotation_or_unit(schedule):
    _, units, (r0, _, _) = schedule
    with pytest.raises(NotFoundError):
        reassign_unit(9999, units[0].id)
    with pytest.raises(NotFoundError):
        reassign_unit(r0, 9999)
