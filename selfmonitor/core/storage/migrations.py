"""Shipped migrations for the aggregate document.

HOW TO ADD A MIGRATION: append a new ``@registry.register(<next version>, ...)``
step at the bottom. Never edit or reorder a shipped step. Each step receives
the whole document, must not mutate it, and must default anything it reads,
since older documents may lack fields added by later steps.
"""

from __future__ import annotations

import copy
from typing import Any

from selfmonitor.core.storage.registry import Document, MigrationRegistry

registry = MigrationRegistry()


def _as_document(data: Any) -> Document:
    return copy.deepcopy(data) if isinstance(data, dict) else {}


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


@registry.register(1, "Initial schema, no-op baseline")
def baseline(data: Any) -> Document:
    return _as_document(data)


@registry.register(2, "Add planning section (GTD, OKR, weekly reviews)")
def add_planning(data: Any) -> Document:
    doc = _as_document(data)
    if doc.get("planning") is None:
        doc["planning"] = {
            "gtdInbox": [],
            "gtdProjects": [],
            "okrCycles": [],
            "weeklyReviews": [],
        }
    return doc


@registry.register(3, "Add prompt library")
def add_prompt_library(data: Any) -> Document:
    doc = _as_document(data)
    if doc.get("promptLibrary") is None:
        doc["promptLibrary"] = {"prompts": [], "collections": []}
    return doc


@registry.register(4, "Add time blocks")
def add_time_blocks(data: Any) -> Document:
    doc = _as_document(data)
    if doc.get("timeBlocks") is None:
        doc["timeBlocks"] = []
    return doc


@registry.register(5, "Add journal (entries + settings)")
def add_journal(data: Any) -> Document:
    doc = _as_document(data)
    if doc.get("journal") is None:
        doc["journal"] = {
            "entries": [],
            "settings": {
                "openRouterKey": "",
                "preferredModel": "google/gemini-flash-1.5",
                "preferredTone": "coach",
                "autoAnalyze": False,
            },
        }
    return doc


@registry.register(6, "Add notification rules and habit streak freezes")
def add_notification_rules_and_freezes(data: Any) -> Document:
    doc = _as_document(data)
    if doc.get("notificationRules") is None:
        doc["notificationRules"] = []
    habits = []
    for habit in _as_list(doc.get("habits")):
        if isinstance(habit, dict):
            habit = dict(habit)
            # everyone starts with one free freeze
            if habit.get("streakFreezes") is None:
                habit["streakFreezes"] = 1
            if habit.get("freezesUsedDates") is None:
                habit["freezesUsedDates"] = []
        habits.append(habit)
    doc["habits"] = habits
    return doc


CURRENT_SCHEMA_VERSION = registry.current_version

__all__ = ["CURRENT_SCHEMA_VERSION", "registry"]
