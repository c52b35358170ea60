"""Canonical default aggregate."""

from __future__ import annotations

from typing import Any, Dict

from selfmonitor.core.state.schemas import AppState


def build_default_state() -> Dict[str, Any]:
    """Fresh default document; callers may mutate it freely."""
    return AppState().to_document()


__all__ = ["build_default_state"]
