"""Decides whether an event update is worth telling participants about.

Pure functions only. Each compared field has a normalizer so that values
differing only in representation (``"10"`` vs ``10``, a naive datetime vs
the same instant in another zone) are not reported as changes. Status,
publicity and bookkeeping columns are deliberately not compared.
"""
from datetime import datetime
from typing import Any, Callable, Mapping

from eventapp.utils import as_utc


def _text(value: Any) -> Any:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _integer(value: Any) -> Any:
    if value is None or value == "":
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        pass
    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)
    return int(number) if number.is_integer() else number


def _instant(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    try:
        return as_utc(datetime.fromisoformat(str(value).strip().replace("Z", "+00:00")))
    except ValueError:
        return str(value)


NORMALIZERS: dict[str, Callable[[Any], Any]] = {
    "title": _text,
    "description": _text,
    "location": _text,
    "category": _text,
    "start_date": _instant,
    "end_date": _instant,
    "max_attendees": _integer,
    "image": _text,
}


def event_snapshot(event) -> dict[str, Any]:
    """The compared fields of an event, as currently stored."""
    return {field: getattr(event, field) for field in NORMALIZERS}


def changed_fields(snapshot: Mapping[str, Any], proposed: Mapping[str, Any]) -> list[str]:
    """Compared fields whose proposed value differs from the snapshot.

    Fields missing from ``proposed`` are left untouched by the update and so
    never count as changed.
    """
    changed = []
    for field, normalize in NORMALIZERS.items():
        if field not in proposed:
            continue
        if normalize(snapshot.get(field)) != normalize(proposed[field]):
            changed.append(field)
    return changed


def detect_changes(snapshot: Mapping[str, Any], proposed: Mapping[str, Any]) -> bool:
    return bool(changed_fields(snapshot, proposed))
