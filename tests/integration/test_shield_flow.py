"""Integration tests: full scan -> overlay -> redaction loop through PrivacyShield."""

from __future__ import annotations

import random
from collections.abc import Callable

import pytest

from privacy_shield import PrivacyShield, ShieldSettings, ShieldState, VirtualClock
from privacy_shield.core.findings import Finding
from privacy_shield.dom import Document, Element, Event, Rect


@pytest.fixture()
def shield(document: Document, clock: VirtualClock) -> PrivacyShield:
    """Return a started shield using the reference scanner and defaults."""
    instance = PrivacyShield(
        document,
        clock,
        settings=ShieldSettings(),
        rng=random.Random(3),
    )
    instance.start()
    return instance


def _click_class(shield: PrivacyShield, class_name: str, index: int = 0) -> None:
    binding = shield.overlay.binding
    assert binding is not None
    buttons = [el for el in binding.popup.iter_elements() if class_name in el.class_list]
    buttons[index].click()


class TestCardScenario:
    """Typing a card number, then fixing it from the popup."""

    def test_card_is_detected_and_fixed(
        self,
        shield: PrivacyShield,
        clock: VirtualClock,
        make_textarea: Callable[..., Element],
    ) -> None:
        """card: 4111... -> alert with count 1 -> Fix -> placeholder, back to clean."""
        textarea = make_textarea()
        assert shield.state is ShieldState.BOUND_CLEAN

        textarea.value = "card: 4111111111111111"
        textarea.dispatch_event(Event("input", bubbles=True))
        clock.advance(300)

        assert shield.state is ShieldState.BOUND_ALERT
        assert shield.overlay.display_text == "1"
        assert shield.overlay.findings == (Finding("credit_card", "4111111111111111"),)

        _click_class(shield, "ps-replace-btn")
        assert textarea.value == "card: [SAFE_CREDIT_CARD]"

        clock.advance(300)
        assert shield.state is ShieldState.BOUND_CLEAN
        assert shield.overlay.display_text == "✓"

    def test_burst_of_typing_scans_once(
        self,
        document: Document,
        clock: VirtualClock,
        scanner_factory,
        make_textarea: Callable[..., Element],
    ) -> None:
        """Keystrokes 50 ms apart collapse into one scan of the final text."""
        scanner = scanner_factory()
        instance = PrivacyShield(document, clock, scanner)
        instance.start()
        textarea = make_textarea()
        clock.advance(300)
        scanner.calls.clear()

        for ch in "a@b.com":
            textarea.value += ch
            textarea.dispatch_event(Event("input", bubbles=True))
            textarea.dispatch_event(Event("keyup", bubbles=True))
            clock.advance(50)
        clock.advance(300)

        assert scanner.calls == ["a@b.com"]


class TestFixAll:
    """Batch redaction over a snapshot of the findings."""

    def test_two_emails_replaced(
        self,
        shield: PrivacyShield,
        clock: VirtualClock,
        make_textarea: Callable[..., Element],
    ) -> None:
        """Fix All replaces both literals."""
        textarea = make_textarea("write to a@b.com or c@d.com")
        clock.advance(300)
        assert shield.overlay.findings == (
            Finding("email", "a@b.com"),
            Finding("email", "c@d.com"),
        )

        _click_class(shield, "ps-fix-all-btn")

        assert textarea.value == "write to [SAFE_EMAIL] or [SAFE_EMAIL]"
        clock.advance(300)
        assert shield.state is ShieldState.BOUND_CLEAN


class TestRichEditor:
    """contenteditable surfaces inside a scrolling container."""

    def test_editor_redaction_and_anchor(
        self,
        shield: PrivacyShield,
        document: Document,
        clock: VirtualClock,
        make_editor: Callable[..., Element],
    ) -> None:
        """The overlay follows the scroller and redaction stays undoable."""
        scroller = document.create_element("div")
        scroller.style["overflow-y"] = "auto"
        scroller.set_bounding_client_rect(Rect(0, 0, 600, 300))
        document.body.append_child(scroller)
        editor = make_editor("reach me at ", "x@y.io", rect=Rect(0, 0, 600, 900), parent=scroller)

        clock.advance(300)
        binding = shield.overlay.binding
        assert binding is not None
        assert binding.anchor is scroller
        assert binding.visible
        assert binding.container.style["top"] == "261px"
        assert binding.container.style["left"] == "561px"

        _click_class(shield, "ps-replace-btn")
        assert editor.inner_text == "reach me at [SAFE_EMAIL]"
        assert document.undo_depth == 1

        clock.advance(300)
        assert shield.state is ShieldState.BOUND_CLEAN

    def test_scrolling_anchor_offscreen_hides_without_rebinding(
        self,
        shield: PrivacyShield,
        document: Document,
        clock: VirtualClock,
        make_textarea: Callable[..., Element],
    ) -> None:
        """Off-screen anchors hide the overlay; scrolling back restores it."""
        textarea = make_textarea("a@b.com")
        clock.advance(300)
        binding = shield.overlay.binding
        assert binding is not None and binding.visible

        textarea.set_bounding_client_rect(Rect(100, 900, 400, 200))
        document.default_view.scroll()
        clock.advance(16)
        assert not shield.overlay.visible

        textarea.set_bounding_client_rect(Rect(100, 100, 400, 200))
        document.default_view.scroll()
        clock.advance(16)
        assert shield.overlay.visible
        assert shield.overlay.binding is binding


class TestLifecycle:
    """Rebinding between surfaces and shutdown."""

    def test_focus_moves_overlay_between_surfaces(
        self,
        shield: PrivacyShield,
        document: Document,
        clock: VirtualClock,
        make_textarea: Callable[..., Element],
    ) -> None:
        """Scanning another surface rebinds; only one container exists."""
        first = make_textarea("one")
        second = make_textarea("two")
        clock.advance(300)
        first.dispatch_event(Event("focus"))
        clock.advance(300)
        assert shield.overlay.bound_surface is first
        containers = document.query_all(
            lambda el: "ps-extension-shield-container" in el.class_list
        )
        assert len(containers) == 1
        assert second.dataset["psAttached"] == "true"

    def test_stop_leaves_document_clean(
        self,
        shield: PrivacyShield,
        document: Document,
        clock: VirtualClock,
        make_textarea: Callable[..., Element],
    ) -> None:
        """stop() removes the overlay, listeners and pending work."""
        textarea = make_textarea("a@b.com")
        shield.stop()
        assert shield.state is ShieldState.UNBOUND
        assert not shield.running
        assert textarea.listener_count() == 0
        assert document.listener_count() == 0
        assert document.default_view.listener_count() == 0
        clock.advance(2000)
        assert clock.pending_timers == 0
        assert clock.pending_frames == 0
