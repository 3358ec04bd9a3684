from __future__ import annotations

import json
from typing import Any, Dict, Optional

from config import CONFIG
from services import db


def get_settings() -> Dict[str, Any]:
    return {key: _decode(value) for key, value in db.read_settings().items()}


def get_setting(key: str, default: Any = None) -> Any:
    value = db.read_setting(key)
    if value is None:
        return default
    return _decode(value)


def save_setting(key: str, value: Any, description: str = "") -> None:
    if isinstance(value, (dict, list, bool)):
        blob = json.dumps(value, ensure_ascii=False)
    else:
        blob = "" if value is None else str(value)
    db.upsert_setting(key, blob, description)


def auto_generate_on_create() -> bool:
    payload = get_setting(CONFIG["settings_keys"]["auto_generation"], {})
    if not isinstance(payload, dict):
        return False
    return payload.get("auto_generate_on_create") is True


def _decode(value: Optional[str]) -> Any:
    if value is None:
        return None
    text = value.strip()
    if text[:1] in ("{", "[") or text in ("true", "false"):
        try:
            return json.loads(text)
        except ValueError:
            return value
    return value
