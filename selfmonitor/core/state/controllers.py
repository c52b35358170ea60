"""State and data-management JSON API (thin, schema-validated)."""

from __future__ import annotations

from flask import Blueprint, Response, current_app, jsonify, request
from pydantic import ValidationError

from selfmonitor.core.state.schemas import FontSettingsUpdate, SettingsUpdate
from selfmonitor.core.state.services import StateService
from selfmonitor.core.storage.errors import MalformedDocument, MigrationFailure

state_api_bp = Blueprint("state_api", __name__)


def _service() -> StateService:
    return current_app.extensions["state_service"]


@state_api_bp.get("/state")
def get_state():
    return jsonify({"ok": True, "state": _service().state})


@state_api_bp.get("/state/<collection>")
def list_items(collection: str):
    try:
        items = _service().list_items(collection)
    except ValueError:
        return jsonify({"ok": False, "error": "unknown_collection"}), 404
    return jsonify({"ok": True, "items": items})


@state_api_bp.post("/state/<collection>")
def add_item(collection: str):
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"ok": False, "error": "validation_error"}), 400
    try:
        item = _service().add_item(collection, payload)
    except ValueError as exc:
        code = str(exc)
        if code == "unknown_collection":
            return jsonify({"ok": False, "error": code}), 404
        return jsonify({"ok": False, "error": "validation_error"}), 400
    return jsonify({"ok": True, "item": item}), 201


@state_api_bp.get("/state/<collection>/<item_id>")
def get_item(collection: str, item_id: str):
    try:
        item = _service().get_item(collection, item_id)
    except ValueError:
        return jsonify({"ok": False, "error": "unknown_collection"}), 404
    if item is None:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "item": item})


@state_api_bp.patch("/state/<collection>/<item_id>")
def update_item(collection: str, item_id: str):
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"ok": False, "error": "validation_error"}), 400
    try:
        item = _service().update_item(collection, item_id, payload)
    except ValueError:
        return jsonify({"ok": False, "error": "unknown_collection"}), 404
    if item is None:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "item": item})


@state_api_bp.delete("/state/<collection>/<item_id>")
def delete_item(collection: str, item_id: str):
    try:
        deleted = _service().delete_item(collection, item_id)
    except ValueError:
        return jsonify({"ok": False, "error": "unknown_collection"}), 404
    if not deleted:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True})


@state_api_bp.patch("/settings")
def update_settings():
    payload = request.get_json(silent=True) or {}
    try:
        data = SettingsUpdate.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "validation_error", "details": exc.errors()}), 400
    settings = _service().update_settings(data.model_dump(by_alias=True, exclude_none=True))
    return jsonify({"ok": True, "settings": settings})


@state_api_bp.patch("/settings/fonts")
def update_font_settings():
    payload = request.get_json(silent=True) or {}
    try:
        data = FontSettingsUpdate.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "validation_error", "details": exc.errors()}), 400
    fonts = _service().update_font_settings(data.model_dump(by_alias=True, exclude_none=True))
    return jsonify({"ok": True, "fontSettings": fonts})


@state_api_bp.get("/data/export")
def export_data():
    service = _service()
    return Response(
        service.export_data(),
        mimetype="application/json",
        headers={"Content-Disposition": f'attachment; filename="{service.export_filename()}"'},
    )


@state_api_bp.post("/data/import")
def import_data():
    upload = request.files.get("file")
    blob = upload.read() if upload is not None else request.get_data()
    if not blob:
        return jsonify({"ok": False, "error": "invalid_file"}), 400
    try:
        state = _service().import_data(blob)
    except MalformedDocument as exc:
        current_app.logger.warning("Rejected import: %s", exc)
        return jsonify({"ok": False, "error": "invalid_file"}), 400
    except MigrationFailure as exc:
        current_app.logger.error("Import aborted: %s", exc)
        return jsonify({"ok": False, "error": "migration_failed", "version": exc.version}), 422
    return jsonify({"ok": True, "state": state})


@state_api_bp.post("/data/reset")
def reset_data():
    state = _service().reset()
    return jsonify({"ok": True, "state": state})


@state_api_bp.get("/data/status")
def storage_status():
    return jsonify({"ok": True, "status": _service().status().to_dict()})


@state_api_bp.post("/data/backup/restore")
def restore_backup():
    state = _service().restore_backup()
    if state is None:
        return jsonify({"ok": False, "error": "no_backup"}), 404
    return jsonify({"ok": True, "state": state})
