"""
Engine configuration. Flask-level settings live in ``app.create_app``;
the constants below are shared by services, DAOs and blueprints.
"""
from __future__ import annotations

import os

CONFIG = {
    # Keys in the settings table
    "settings_keys": {
        "round_robin": "round_robin_offset",
        "auto_generation": "auto-generation",
    },

    # Cohort labels; new interns alternate between them when no batch is given
    "batches": ["A", "B"],

    # Accepted reason codes for extension audit rows
    "extension_reasons": ["presentation", "internal query", "leave", "other"],
    "max_extension_days": 365,

    # How far back an already ended rotation may still be picked for an extension
    "extension_grace_days": 7,

    # Shifting rotations after a resize: attempts per row before it is logged and skipped
    "shift_attempts": 2,
}


def auto_rotation_enabled(value: str | None = None) -> bool:
    """Read the AUTO_ROTATION switch; enabled unless set to false, 0 or empty."""
    raw = os.environ.get("AUTO_ROTATION") if value is None else value
    if raw is None:
        return True
    return raw.strip().lower() not in {"false", "0", ""}
