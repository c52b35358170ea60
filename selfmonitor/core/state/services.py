"""State services: the live aggregate, collection CRUD, and data management.

The service owns the one in-memory aggregate. ``load`` runs once at startup;
every mutation saves the whole document back through the gateway
(best-effort, never raises). Import and backup restore build a complete new
aggregate first and only then swap it in, so a failure leaves the live state
as it was.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from selfmonitor.core.events.event_bus import EventBus
from selfmonitor.core.state.defaults import build_default_state
from selfmonitor.core.state.schemas import COLLECTIONS, AppState, CollectionSpec
from selfmonitor.core.storage.codec import Blob, PortableCodec
from selfmonitor.core.storage.events import (
    STATE_BACKUP_RESTORED,
    STATE_DATA_IMPORTED,
    STATE_DATA_RESET,
)
from selfmonitor.core.storage.gateway import PersistenceGateway, StorageStatus

TASK_STATUS_DONE = "done"


def _now() -> str:
    return datetime.utcnow().isoformat(timespec="milliseconds") + "Z"


def _collection_spec(name: str) -> CollectionSpec:
    spec = COLLECTIONS.get(name)
    if spec is None:
        raise ValueError("unknown_collection")
    return spec


class StateService:
    def __init__(
        self,
        gateway: PersistenceGateway,
        codec: Optional[PortableCodec] = None,
        defaults_factory: Callable[[], Dict[str, Any]] = build_default_state,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        self.gateway = gateway
        self.codec = codec or PortableCodec(gateway.registry)
        self.defaults_factory = defaults_factory
        self.event_bus = event_bus
        self._state: Dict[str, Any] = defaults_factory()
        self.loaded = False

    # ---- lifecycle ----

    def load(self) -> Dict[str, Any]:
        self._state = self.gateway.load(self.defaults_factory())
        self.loaded = True
        return self._state

    @property
    def state(self) -> Dict[str, Any]:
        return self._state

    def snapshot(self) -> AppState:
        return AppState.model_validate(self._state)

    def _persist(self) -> bool:
        return self.gateway.save(self._state)

    def _emit(self, event_type: str, payload: Dict[str, Any]) -> None:
        if self.event_bus is not None:
            self.event_bus.emit(event_type, payload)

    # ---- collections ----

    def _items(self, collection: str) -> List[Dict[str, Any]]:
        _collection_spec(collection)
        items = self._state.get(collection)
        if not isinstance(items, list):
            items = []
            self._state[collection] = items
        return items

    def list_items(self, collection: str) -> List[Dict[str, Any]]:
        return list(self._items(collection))

    def get_item(self, collection: str, item_id: str) -> Optional[Dict[str, Any]]:
        for item in self._items(collection):
            if isinstance(item, dict) and item.get("id") == item_id:
                return item
        return None

    def add_item(self, collection: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        spec = _collection_spec(collection)
        if not isinstance(fields, dict):
            raise ValueError("validation_error")
        item = {k: v for k, v in fields.items() if k not in ("id", "createdAt", "updatedAt")}
        item["id"] = str(uuid.uuid4())
        now = _now()
        if spec.created_at:
            item["createdAt"] = now
        if spec.updated_at:
            item["updatedAt"] = now
        self._items(collection).append(item)
        self._persist()
        return item

    def update_item(self, collection: str, item_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        spec = _collection_spec(collection)
        item = self.get_item(collection, item_id)
        if item is None:
            return None
        for key, value in (updates or {}).items():
            if key in ("id", "createdAt"):
                continue
            item[key] = value
        if spec.updated_at:
            item["updatedAt"] = _now()
        self._persist()
        return item

    def delete_item(self, collection: str, item_id: str) -> bool:
        items = self._items(collection)
        kept = [i for i in items if not (isinstance(i, dict) and i.get("id") == item_id)]
        if len(kept) == len(items):
            return False
        self._state[collection] = kept
        self._clear_references(collection, item_id)
        self._persist()
        return True

    def _clear_references(self, collection: str, item_id: str) -> None:
        """Referential cleanup; dependents are detached, never deleted."""
        tasks = [t for t in self._items("tasks") if isinstance(t, dict)]
        if collection == "projects":
            for task in tasks:
                if task.get("projectId") == item_id:
                    task["projectId"] = None
        elif collection == "lists":
            for task in tasks:
                if task.get("listId") == item_id:
                    task["listId"] = None
        elif collection == "tags":
            for task in tasks:
                if isinstance(task.get("tags"), list):
                    task["tags"] = [tag for tag in task["tags"] if tag != item_id]

    # ---- task / goal helpers ----

    def move_task(self, task_id: str, status: str) -> Optional[Dict[str, Any]]:
        task = self.get_item("tasks", task_id)
        if task is None:
            return None
        now = _now()
        task["status"] = status
        task["completedAt"] = now if status == TASK_STATUS_DONE else None
        task["updatedAt"] = now
        self._persist()
        return task

    def toggle_subtask(self, task_id: str, subtask_id: str) -> Optional[Dict[str, Any]]:
        task = self.get_item("tasks", task_id)
        if task is None:
            return None
        for subtask in task.get("subtasks") or []:
            if isinstance(subtask, dict) and subtask.get("id") == subtask_id:
                subtask["completed"] = not subtask.get("completed", False)
        task["updatedAt"] = _now()
        self._persist()
        return task

    def toggle_milestone(self, goal_id: str, milestone_id: str) -> Optional[Dict[str, Any]]:
        goal = self.get_item("goals", goal_id)
        if goal is None:
            return None
        milestones = [m for m in goal.get("milestones") or [] if isinstance(m, dict)]
        for milestone in milestones:
            if milestone.get("id") == milestone_id:
                completed = not milestone.get("completed", False)
                milestone["completed"] = completed
                milestone["completedAt"] = _now() if completed else None
        if milestones:
            done = sum(1 for m in milestones if m.get("completed"))
            goal["progress"] = round(done / len(milestones) * 100)
        self._persist()
        return goal

    # ---- settings ----

    def update_settings(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        settings = dict(self._state.get("settings") or {})
        for key, value in changes.items():
            if isinstance(value, dict) and isinstance(settings.get(key), dict):
                settings[key] = {**settings[key], **value}
            else:
                settings[key] = value
        self._state["settings"] = settings
        self._persist()
        return settings

    def update_font_settings(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        fonts = {**(self._state.get("fontSettings") or {}), **changes}
        self._state["fontSettings"] = fonts
        self._persist()
        return fonts

    # ---- data management ----

    def export_data(self) -> str:
        return self.codec.export(self._state)

    def export_filename(self) -> str:
        return self.codec.export_filename()

    def import_data(self, blob: Blob) -> Dict[str, Any]:
        """Replace the live aggregate with an imported one, or raise and change nothing."""
        imported, source_version = self.codec.import_with_version(blob, self.defaults_factory())
        self._state = imported
        self._persist()
        self._emit(
            STATE_DATA_IMPORTED,
            {
                "schema_version": self.codec.current_version,
                "source_version": source_version,
                "collections": {name: len(imported.get(name) or []) for name in COLLECTIONS},
            },
        )
        return imported

    def reset(self) -> Dict[str, Any]:
        """Wipe the stored document and version; the pre-migration backup survives."""
        self.gateway.clear()
        self._state = self.defaults_factory()
        self._emit(
            STATE_DATA_RESET,
            {"reset_at": datetime.utcnow().isoformat(), "backup_kept": self.gateway.backup.has_backup()},
        )
        return self._state

    def restore_backup(self) -> Optional[Dict[str, Any]]:
        restored = self.gateway.backup.restore(self.defaults_factory())
        if restored is None:
            return None
        self._state = restored
        self._persist()
        self._emit(STATE_BACKUP_RESTORED, {"restored_at": datetime.utcnow().isoformat()})
        return restored

    def status(self) -> StorageStatus:
        return self.gateway.status()


__all__ = ["StateService"]
