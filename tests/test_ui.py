"""Tests for the UI sink and its suppression guard."""

import pytest

from envrun.core.ui import UIContext


def test_messages_are_prefixed(recording_ui):
    recording_ui.error("not executable: tool")
    recording_ui.warn("careful")
    assert recording_ui.output.splitlines() == [
        "envrun: not executable: tool",
        "envrun: careful",
    ]


def test_suppressed_nulls_and_restores(ui_context, recording_ui):
    with ui_context.suppressed() as saved:
        assert saved is recording_ui
        assert ui_context.ui is None
        ui_context.error("dropped")
    assert ui_context.ui is recording_ui
    assert recording_ui.output == ""


def test_suppressed_restores_on_error(ui_context, recording_ui):
    with pytest.raises(RuntimeError):
        with ui_context.suppressed():
            raise RuntimeError("boom")
    assert ui_context.ui is recording_ui


def test_suppressed_restores_on_system_exit(ui_context, recording_ui):
    with pytest.raises(SystemExit):
        with ui_context.suppressed():
            raise SystemExit(3)
    assert ui_context.ui is recording_ui


def test_empty_context_ignores_messages():
    context = UIContext()
    context.error("nobody listens")
    context.warn("nobody listens")
    with context.suppressed() as saved:
        assert saved is None
    assert context.ui is None
