"""Tests for exporting markups and report summaries."""

import json

from drawing_markup.core.compositor import render_markup
from drawing_markup.models.annotation import Annotation, AnnotationKind, Point
from drawing_markup.models.markup_record import DrawingMarkupRecord
from drawing_markup.services.markup_export_service import (
    annotation_summary_header, annotation_summary_lines, export_record,
    generate_export_filename, get_exports_folder, render_thumbnail
)
from drawing_markup.utils.image_utils import encode_png

from conftest import make_drawing


def _record(annotations=(), width=640, height=480):
    flattened = render_markup(make_drawing(width, height), annotations)
    return DrawingMarkupRecord(
        base_image_reference="/drawings/S-201.png",
        drawing_name="S-201: Level 2/Framing",
        flattened_png=encode_png(flattened),
        annotations=annotations,
        finding_id="F-9",
    )


def test_summary_lines_number_annotations(circle):
    unlabeled = Annotation(id="a", kind=AnnotationKind.ARROW, origin=Point(0, 0))
    lines = annotation_summary_lines([circle, unlabeled, circle.to_dict()])

    assert lines == [
        "1. Issue 1 (circle)",
        "2. Annotation 2 (arrow)",
        "3. Issue 1 (circle)",
    ]
    assert annotation_summary_header(lines) == "Annotations (3):"


def test_export_filename_is_sanitized_and_unique(qapp, tmp_path):
    name = generate_export_filename("S-201: Level 2/Framing", tmp_path)
    assert name == "S-201_ Level 2_Framing_markup.png"

    (tmp_path / name).write_bytes(b"")
    second = generate_export_filename("S-201: Level 2/Framing", tmp_path)
    assert second != name
    assert second.endswith(".png")


def test_export_writes_png_and_sidecar(qapp, tmp_path, circle):
    record = _record([circle])
    success, path = export_record(record, tmp_path)

    assert success
    png_path = tmp_path / "S-201_ Level 2_Framing_markup.png"
    assert path == str(png_path)
    assert png_path.read_bytes() == record.flattened_png

    sidecar = json.loads(png_path.with_suffix(".json").read_text(encoding="utf-8"))
    assert sidecar["caption"] == "Marked up: S-201: Level 2/Framing"
    assert sidecar["finding_id"] == "F-9"
    assert sidecar["summary"] == ["1. Issue 1 (circle)"]
    assert sidecar["annotations"] == [circle.to_dict()]


def test_export_twice_keeps_both(qapp, tmp_path):
    record = _record()
    _, first = export_record(record, tmp_path)
    _, second = export_record(record, tmp_path)
    assert first != second
    assert len(list(tmp_path.glob("*.png"))) == 2


def test_export_reports_failure(qapp, tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("file in the way")

    success, message = export_record(_record(), blocker)
    assert not success
    assert message.startswith("Export failed")


def test_default_export_folder(isolated_home):
    assert get_exports_folder() == isolated_home / "exports"
    assert get_exports_folder().is_dir()


def test_thumbnail_fits_max_size(qapp):
    thumb = render_thumbnail(_record(width=640, height=480), max_size=320)
    assert (thumb.width(), thumb.height()) == (320, 240)


def test_small_image_not_upscaled(qapp):
    thumb = render_thumbnail(_record(width=100, height=50), max_size=320)
    assert (thumb.width(), thumb.height()) == (100, 50)


def test_thumbnail_of_corrupt_png_is_none(qapp):
    record = DrawingMarkupRecord("/x.png", "X", b"garbage")
    assert render_thumbnail(record) is None
