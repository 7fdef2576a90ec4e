"""Shared fixtures: offscreen Qt application, drawings and annotations."""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtGui import QColor, QImage
from PyQt6.QtWidgets import QApplication

from drawing_markup.models.annotation import Annotation, AnnotationKind, Extent, Point


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep user data (markups, exports, logs) inside the test's tmp dir."""
    home = tmp_path / "home"
    monkeypatch.setenv("DRAWING_MARKUP_HOME", str(home))
    return home


def make_drawing(width=300, height=300, color="#ffffff") -> QImage:
    image = QImage(width, height, QImage.Format.Format_ARGB32)
    image.fill(QColor(color))
    return image


@pytest.fixture
def base_image(qapp):
    """Plain white 300x300 drawing."""
    return make_drawing()


@pytest.fixture
def drawing_file(qapp, tmp_path):
    """A 240x160 white PNG drawing on disk with a grey grid line."""
    image = make_drawing(240, 160)
    for x in range(240):
        image.setPixelColor(x, 80, QColor("#808080"))
    path = tmp_path / "A-101.png"
    assert image.save(str(path), "PNG")
    return path


@pytest.fixture
def circle():
    return Annotation(
        id="c1",
        kind=AnnotationKind.CIRCLE,
        origin=Point(10, 10),
        extent=Extent(100, 200),
        label="Issue 1",
    )


@pytest.fixture
def highlight():
    return Annotation(
        id="h1",
        kind=AnnotationKind.HIGHLIGHT,
        origin=Point(40, 40),
        extent=Extent(120, 80),
    )


@pytest.fixture
def text_note():
    return Annotation(
        id="t1",
        kind=AnnotationKind.TEXT,
        origin=Point(20, 260),
        label="Note",
    )

