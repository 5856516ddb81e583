"""Shared fixtures for the privacy shield test suite."""

from __future__ import annotations

import random
from collections.abc import Callable

import pytest

from privacy_shield.clock import VirtualClock
from privacy_shield.config import ShieldSettings
from privacy_shield.core.findings import Finding
from privacy_shield.dom import Document, Element, Rect


class RecordingScanner:
    """Scanner double that records every text it was given."""

    def __init__(self, results: Callable[[str], list[Finding]] | None = None) -> None:
        self.calls: list[str] = []
        self._results = results or (lambda text: [])

    def scan(self, text: str) -> list[Finding]:
        self.calls.append(text)
        return self._results(text)


@pytest.fixture()
def clock() -> VirtualClock:
    """Return a fresh virtual clock at t=0."""
    return VirtualClock()


@pytest.fixture()
def document() -> Document:
    """Return an empty document with a 1280x800 viewport."""
    return Document()


@pytest.fixture()
def settings() -> ShieldSettings:
    """Return settings at the reference defaults."""
    return ShieldSettings()


@pytest.fixture()
def rng() -> random.Random:
    """Return a seeded RNG for banner selection."""
    return random.Random(1234)


@pytest.fixture()
def make_textarea(document: Document) -> Callable[..., Element]:
    """Factory: textarea appended to body with a visible rectangle."""

    def factory(value: str = "", rect: Rect | None = None, parent: Element | None = None) -> Element:
        textarea = document.create_element("textarea")
        textarea.value = value
        textarea.set_bounding_client_rect(rect or Rect(100, 100, 400, 200))
        (parent or document.body).append_child(textarea)
        return textarea

    return factory


@pytest.fixture()
def make_editor(document: Document) -> Callable[..., Element]:
    """Factory: ``div[contenteditable=true]`` holding the given text runs."""

    def factory(*runs: str, rect: Rect | None = None, parent: Element | None = None) -> Element:
        editor = document.create_element("div", {"contenteditable": "true"})
        for run in runs:
            span = document.create_element("span")
            span.append_child(document.create_text_node(run))
            editor.append_child(span)
        editor.set_bounding_client_rect(rect or Rect(100, 400, 400, 200))
        (parent or document.body).append_child(editor)
        return editor

    return factory


@pytest.fixture()
def recording_scanner() -> RecordingScanner:
    """Return a scanner double reporting no findings."""
    return RecordingScanner()


@pytest.fixture()
def scanner_factory() -> type[RecordingScanner]:
    """Return the scanner double class, for tests that script results."""
    return RecordingScanner
