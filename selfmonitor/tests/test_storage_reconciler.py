"""Defaults reconciliation rules."""

from __future__ import annotations

import copy

import pytest

from selfmonitor.core.storage.reconciler import reconcile

pytestmark = pytest.mark.unit


def test_missing_keys_come_from_defaults(defaults):
    result = reconcile(defaults, {"tasks": [{"id": "a"}]})
    assert set(result) == set(defaults)
    assert result["tasks"] == [{"id": "a"}]
    assert result["settings"] == defaults["settings"]


def test_arrays_replace_wholesale():
    defaults = {"tags": [{"id": "default"}]}
    saved = {"tags": [{"id": "x"}, {"id": "x"}]}
    assert reconcile(defaults, saved)["tags"] == [{"id": "x"}, {"id": "x"}]


def test_empty_saved_array_wins_over_default():
    assert reconcile({"tags": [1, 2]}, {"tags": []})["tags"] == []


def test_non_array_value_for_array_default_falls_back():
    result = reconcile({"tasks": []}, {"tasks": "oops"})
    assert result["tasks"] == []


def test_nested_objects_merge_key_by_key(defaults):
    saved = {"settings": {"language": "fa", "notifications": {"dailySummary": True}}}
    result = reconcile(defaults, saved)
    assert result["settings"]["language"] == "fa"
    assert result["settings"]["calendar"] == "gregorian"
    assert result["settings"]["notifications"]["dailySummary"] is True
    assert result["settings"]["notifications"]["enabled"] is True
    assert result["settings"]["pomodoro"] == defaults["settings"]["pomodoro"]


def test_non_object_for_object_default_keeps_default(defaults):
    result = reconcile(defaults, {"planning": ["not", "an", "object"]})
    assert result["planning"] == defaults["planning"]


def test_scalars_are_taken_as_is():
    result = reconcile({"a": 1, "b": "x"}, {"a": None, "b": 42})
    assert result == {"a": None, "b": 42}


def test_unknown_keys_are_dropped(defaults):
    result = reconcile(defaults, {"retiredFeature": [1], "settings": {"legacyFlag": True}})
    assert "retiredFeature" not in result
    assert "legacyFlag" not in result["settings"]


def test_non_object_saved_yields_defaults(defaults):
    assert reconcile(defaults, None) == defaults
    assert reconcile(defaults, ["x"]) == defaults


def test_reconciliation_is_idempotent(defaults):
    saved = {
        "tasks": [{"id": "a"}],
        "settings": {"theme": "dark", "pomodoro": {"focusDuration": 50}},
        "extra": 1,
        "planning": "bad",
    }
    once = reconcile(defaults, saved)
    assert reconcile(defaults, once) == once


def test_result_does_not_alias_inputs(defaults):
    pristine = copy.deepcopy(defaults)
    saved = {"tasks": [{"id": "a"}]}
    result = reconcile(defaults, saved)

    result["tags"].append({"id": "t"})
    result["settings"]["notifications"]["enabled"] = False
    result["tasks"][0]["title"] = "changed"

    assert defaults == pristine
    assert saved == {"tasks": [{"id": "a"}]}
