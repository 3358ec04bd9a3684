from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from app import create_app
from dao import interns_dao, rotations_dao, units_dao


@pytest.fixture()
def app(tmp_path: Path):
    app = create_app({
        "TESTING": True,
        "DATABASE": str(tmp_path / "test.sqlite"),
        "AUTO_INIT_DB": True,
        "SEED_DATABASE": False,
    })
    yield app


@pytest.fixture()
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


def add_units(durations, names=None):
    units = []
    for index, duration in enumerate(durations):
        name = names[index] if names else f"U{index}"
        unit_id = units_dao.create_unit({"name": name, "duration_days": duration, "position": index + 1})
        units.append(units_dao.get_unit(unit_id))
    return units


def add_intern(name="Intern", start=date(2024, 1, 1), batch="A", extension_days=0):
    return interns_dao.create_intern(
        {"name": name, "batch": batch, "start_date": start, "extension_days": extension_days}
    )


def add_rotation(intern_id, unit, start, end, manual=False):
    return rotations_dao.create_rotation(intern_id, unit.id, start, end, manual=manual)


@pytest.fixture()
def three_units(ctx):
    return add_units([2, 2, 2])
