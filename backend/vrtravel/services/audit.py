from __future__ import annotations

import json
from typing import Any, Optional

from vrtravel.repositories.audit_log_repository import AuditLogRepository
from vrtravel.utils import new_id, now_utc


def _safe_json(v: Any, max_len: int = 2000) -> Any:
    """Make sure audit payload stays light; truncate long strings."""
    if v is None:
        return None
    if isinstance(v, (int, float, bool)):
        return v
    if isinstance(v, str):
        return v if len(v) <= max_len else v[:max_len] + "…"
    if isinstance(v, list):
        return [_safe_json(x, max_len=max_len) for x in v][:200]
    if isinstance(v, dict):
        out: dict[str, Any] = {}
        for k, val in list(v.items())[:200]:
            out[str(k)] = _safe_json(val, max_len=max_len)
        return out

    s = str(v)
    return s if len(s) <= max_len else s[:max_len] + "…"


def shallow_diff(before: Optional[dict[str, Any]], after: Optional[dict[str, Any]]) -> dict[str, Any]:
    """Return only changed fields (top-level) as {field: {before, after}}."""
    b = before or {}
    a = after or {}

    diff: dict[str, Any] = {}
    for k in sorted(set(b.keys()) | set(a.keys())):
        if k in {"_id", "updated_at"}:
            continue
        bv = b.get(k)
        av = a.get(k)
        if bv != av:
            diff[k] = {"before": _safe_json(bv), "after": _safe_json(av)}
    return diff


async def write_audit_log(
    db,
    *,
    actor: dict[str, Any],
    action: str,
    target_type: str,
    target_id: str,
    before: Optional[dict[str, Any]] = None,
    after: Optional[dict[str, Any]] = None,
    meta: Optional[dict[str, Any]] = None,
) -> None:
    """Persist an audit entry for an admin mutation.

    actor expected: {id, email}
    """

    doc = {
        "id": new_id("aud"),
        "actor": {"id": actor.get("id"), "email": actor.get("email")},
        "action": action,
        "target_type": target_type,
        "target_id": target_id,
        "diff": shallow_diff(before, after),
        "meta": _safe_json(meta or {}),
        "created_at": now_utc(),
    }

    try:
        json.dumps(doc, default=str)
    except (TypeError, ValueError):
        doc["meta"] = {"note": "meta_unserializable"}

    await AuditLogRepository(db).insert(doc)
