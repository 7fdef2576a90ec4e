"""Tests for the markup editor widgets."""

import pytest
from PyQt6.QtCore import QPointF

from drawing_markup.core.markup_session import SessionState
from drawing_markup.models.annotation import AnnotationKind
from drawing_markup.services.image_loader import SynchronousImageLoader
from drawing_markup.widgets import markup_editor_dialog
from drawing_markup.widgets.markup_editor_dialog import MarkupEditorDialog
from drawing_markup.widgets.markup_toolbar import MarkupToolbar


class _FakeInputDialog:
    answer = ("", True)
    prompts = []

    @classmethod
    def getText(cls, parent, title, prompt):
        cls.prompts.append(prompt)
        return cls.answer


@pytest.fixture(autouse=True)
def no_modal_prompts(monkeypatch):
    """A real QInputDialog would block the offscreen event loop forever."""
    monkeypatch.setattr(markup_editor_dialog, "QInputDialog", _FakeInputDialog)
    monkeypatch.setattr(_FakeInputDialog, "answer", ("", True))
    monkeypatch.setattr(_FakeInputDialog, "prompts", [])


def _dialog(reference, sink=None):
    return MarkupEditorDialog(
        str(reference),
        "A-101 Floor Plan",
        evidence_sink=sink,
        finding_id="F-1",
        loader=SynchronousImageLoader(),
    )


# ── Toolbar ──────────────────────────────────────────────────────────

def test_toolbar_defaults_to_circle(qapp):
    toolbar = MarkupToolbar()
    assert toolbar.current_tool is AnnotationKind.CIRCLE
    assert toolbar.tool_button(AnnotationKind.CIRCLE).isChecked()
    assert not toolbar.undo_button.isEnabled()


def test_toolbar_click_changes_tool(qapp):
    toolbar = MarkupToolbar()
    changes = []
    toolbar.tool_changed.connect(changes.append)

    toolbar.tool_button(AnnotationKind.HIGHLIGHT).click()

    assert changes == [AnnotationKind.HIGHLIGHT]
    assert toolbar.current_tool is AnnotationKind.HIGHLIGHT
    assert not toolbar.tool_button(AnnotationKind.CIRCLE).isChecked()


# ── Editor dialog ────────────────────────────────────────────────────

def test_dialog_disabled_until_loaded(qapp, drawing_file):
    dialog = _dialog(drawing_file)
    assert not dialog.toolbar.isEnabled()

    dialog.open_session()

    assert dialog.session.state is SessionState.READY
    assert dialog.toolbar.isEnabled()
    assert dialog.canvas.image is not None


def test_dialog_shows_failure(qapp, tmp_path):
    dialog = _dialog(tmp_path / "missing.png")
    dialog.open_session()

    assert dialog.session.state is SessionState.FAILED
    assert not dialog.toolbar.isEnabled()


def test_canvas_reports_display_rect(qapp, drawing_file):
    dialog = _dialog(drawing_file)
    dialog.open_session()
    dialog.canvas.resize(480, 320)
    dialog.canvas.set_image(dialog.session.flattened_image)

    rect = dialog.canvas.display_rect
    assert (rect.width(), rect.height()) == (240, 160)
    assert dialog.session.mapper.get_display_rect() == rect


def test_toolbar_drives_session(qapp, drawing_file):
    dialog = _dialog(drawing_file)
    dialog.open_session()
    dialog.session.set_label_resolver(lambda kind: "Crack")

    dialog.toolbar.tool_button(AnnotationKind.ARROW).click()
    dialog.session.press(QPointF(10, 10))
    dialog.session.release(QPointF(60, 40))

    annotation, = dialog.session.annotations()
    assert annotation.kind is AnnotationKind.ARROW
    assert annotation.label == "Crack"
    assert dialog.toolbar.undo_button.isEnabled()

    dialog.toolbar.undo_button.click()
    assert dialog.session.annotations() == ()
    assert not dialog.toolbar.undo_button.isEnabled()


def test_save_emits_record_and_feeds_sink(qapp, drawing_file):
    sink = []
    dialog = _dialog(drawing_file, sink=sink.append)
    saved = []
    dialog.markup_saved.connect(saved.append)
    dialog.open_session()

    dialog.session.set_label_resolver(lambda kind: None)
    dialog.session.press(QPointF(0, 0))
    dialog.session.release(QPointF(30, 30))
    dialog._save_btn.click()

    assert len(saved) == 1
    assert sink == saved
    assert saved[0].finding_id == "F-1"
    assert dialog.session.state is SessionState.CLOSED


def test_reject_cancels_session(qapp, drawing_file):
    dialog = _dialog(drawing_file)
    dialog.open_session()
    dialog.reject()
    assert dialog.session.state is SessionState.CLOSED


def test_prompt_label_wording(qapp, drawing_file, monkeypatch):
    dialog = _dialog(drawing_file)

    monkeypatch.setattr(_FakeInputDialog, "answer", ("  Leak  ", True))
    assert dialog.prompt_label(AnnotationKind.TEXT) == "Leak"

    monkeypatch.setattr(_FakeInputDialog, "answer", ("ignored", False))
    assert dialog.prompt_label(AnnotationKind.CIRCLE) is None

    monkeypatch.setattr(_FakeInputDialog, "answer", ("   ", True))
    assert dialog.prompt_label(AnnotationKind.ARROW) is None

    assert _FakeInputDialog.prompts == [
        "Enter label text:",
        "Enter label (optional):",
        "Enter label (optional):",
    ]


def test_prompted_text_label_flows_into_store(qapp, drawing_file, monkeypatch):
    monkeypatch.setattr(_FakeInputDialog, "answer", ("", False))
    dialog = _dialog(drawing_file)
    dialog.open_session()
    dialog.session.set_tool(AnnotationKind.TEXT)

    dialog.session.press(QPointF(5, 5))
    assert dialog.session.release(QPointF(5, 5)) is None
    assert dialog.session.annotations() == ()


def test_prompted_shape_label_defaults_to_issue_number(qapp, drawing_file):
    dialog = _dialog(drawing_file)
    dialog.open_session()

    dialog.session.press(QPointF(5, 5))
    annotation = dialog.session.release(QPointF(40, 40))

    assert annotation.label == "Issue 1"
    assert _FakeInputDialog.prompts == ["Enter label (optional):"]
