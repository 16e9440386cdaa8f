from __future__ import annotations

import copy
from typing import Any, Iterable, Mapping


def _matches(record: Mapping[str, Any], needle: str) -> bool:
    for value in record.values():
        values = value if isinstance(value, (list, tuple)) else [value]
        for v in values:
            if isinstance(v, str) and needle in v.lower():
                return True
    return False


def process_results(
    opts: Mapping[str, Any] | None, records: Iterable[Mapping[str, Any]]
) -> list[dict[str, Any]]:
    """Shape raw directory records for callers.

    Supported options:
        fields  - attribute names to keep (``dn`` is always kept)
        q       - case-insensitive substring filter over string values
        start   - index of the first record to return
        end     - index past the last record to return

    Records are deep-copied, the input is never modified.
    """
    items = [copy.deepcopy(dict(r)) for r in records]
    if not opts:
        return items

    q = str(opts.get("q") or "").strip().lower()
    if q:
        items = [r for r in items if _matches(r, q)]

    start = opts.get("start")
    end = opts.get("end")
    if start is not None or end is not None:
        lo = int(start) if start is not None else None
        hi = int(end) if end is not None else None
        items = items[lo:hi]

    fields = opts.get("fields")
    if fields:
        wanted = set(fields) | {"dn"}
        items = [{k: v for k, v in r.items() if k in wanted} for r in items]

    return items
