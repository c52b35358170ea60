"""Deep-merge a loaded document into the canonical default aggregate."""

from __future__ import annotations

import copy
from typing import Any, Dict


def reconcile(defaults: Dict[str, Any], saved: Any) -> Dict[str, Any]:
    """Return ``defaults`` overlaid with ``saved``, shaped like ``defaults``.

    * scalars: the saved value when the key exists, else the default;
    * lists: the saved list replaces the default wholesale, but only when it
      is a list;
    * dicts: merged key by key; a non-dict saved value keeps the default;
    * keys unknown to ``defaults`` are dropped.

    The result shares no containers with ``defaults``.
    """
    result: Dict[str, Any] = {}
    if not isinstance(saved, dict):
        saved = {}
    for key, default in defaults.items():
        if key not in saved:
            result[key] = copy.deepcopy(default)
            continue
        value = saved[key]
        if isinstance(default, dict):
            result[key] = reconcile(default, value)
        elif isinstance(default, list):
            result[key] = copy.deepcopy(value) if isinstance(value, list) else copy.deepcopy(default)
        else:
            result[key] = copy.deepcopy(value)
    return result


__all__ = ["reconcile"]
