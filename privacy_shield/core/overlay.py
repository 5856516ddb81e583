"""Overlay state machine.

One ``OverlayController`` owns at most one live binding. The binding moves
between three states::

    UNBOUND --bind/update_shield--> BOUND_CLEAN <--findings--> BOUND_ALERT
       ^                                  |                        |
       +-------------- teardown ----------+------------------------+

Binding a different surface tears the current binding down first, so there
is never more than one rendered container in the document.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import TYPE_CHECKING

from privacy_shield.assets import StaticAssetResolver
from privacy_shield.config import ShieldSettings
from privacy_shield.core.binding import OverlayBinding
from privacy_shield.core.findings import Finding, Findings, display_count, freeze_findings
from privacy_shield.core.positioning import PositionSynchronizer, resolve_anchor
from privacy_shield.core.redaction import RedactionOutcome, Redactor
from privacy_shield.core.surfaces import describe, is_surface
from privacy_shield.dom import Element, listen
from privacy_shield.exceptions import SurfaceKindError

if TYPE_CHECKING:
    from privacy_shield.assets import AssetResolver
    from privacy_shield.clock import Clock
    from privacy_shield.dom import Document, Event

log = logging.getLogger(__name__)

__all__ = [
    "ALERT_MESSAGES",
    "CLEAN_STATUS",
    "OverlayController",
    "ShieldState",
]

CLEAN_STATUS = "✓"

ALERT_MESSAGES: tuple[str, ...] = (
    "Oh come on!!",
    "Are you serious?",
    "Not again...",
    "Seriously?",
    "Uh oh!",
    "Stop that!",
    "Nooooo!",
    "Really?",
    "Why would you do that?",
    "Come on, be better!",
    "My eyes!!",
    "Privacy is a thing, you know?",
    "Let's keep some secrets, shall we?",
    "Yikes!",
    "Bruh...",
)

# CSS hooks shared with the extension stylesheet
CONTAINER_CLASS = "ps-extension-shield-container"
BADGE_CLASS = "ps-extension-shield"
DANGER_CLASS = "ps-danger"
LOGO_CLASS = "ps-extension-logo"
POPUP_CLASS = "ps-extension-popup"
POPUP_VISIBLE_CLASS = "ps-visible"
BANNER_CLASS = "ps-disgust-banner"
HEADER_CLASS = "ps-extension-header"
FIX_ALL_CLASS = "ps-fix-all-btn"
LIST_CLASS = "ps-extension-list"
ITEM_CLASS = "ps-extension-item"
ITEM_TYPE_CLASS = "ps-extension-item-type"
ITEM_VALUE_CLASS = "ps-extension-item-value"
FIX_CLASS = "ps-replace-btn"


class ShieldState(str, Enum):  # noqa: UP042
    """Lifecycle state of the overlay."""

    UNBOUND = "unbound"
    BOUND_CLEAN = "bound_clean"
    BOUND_ALERT = "bound_alert"


class OverlayController:
    """Owner of the single overlay.

    Parameters
    ----------
    document:
        Document the overlay is rendered into (under ``body``).
    clock:
        Frame source for position syncs.
    redactor:
        Performs Fix / Fix All; defaults to the standard strategy chains.
    settings:
        Geometry and display constants.
    assets:
        Resolves the badge logo URL.
    rng:
        Picks the alert banner message.
    """

    def __init__(
        self,
        document: Document,
        clock: Clock,
        *,
        redactor: Redactor | None = None,
        settings: ShieldSettings | None = None,
        assets: AssetResolver | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._document = document
        self._clock = clock
        self._redactor = redactor or Redactor()
        self._settings = settings or ShieldSettings()
        self._assets = assets or StaticAssetResolver()
        self._rng = rng or random.Random()
        self._binding: OverlayBinding | None = None

    # -- read-only view ----------------------------------------------------

    @property
    def binding(self) -> OverlayBinding | None:
        return self._binding

    @property
    def bound_surface(self) -> Element | None:
        return self._binding.surface if self._binding else None

    @property
    def state(self) -> ShieldState:
        if self._binding is None:
            return ShieldState.UNBOUND
        return ShieldState.BOUND_ALERT if self._binding.findings else ShieldState.BOUND_CLEAN

    @property
    def findings(self) -> Findings:
        return self._binding.findings if self._binding else ()

    @property
    def display_text(self) -> str | None:
        """Badge status text, or None when unbound."""
        return self._binding.status.text_content if self._binding else None

    @property
    def popup_open(self) -> bool:
        return self._binding is not None and POPUP_VISIBLE_CLASS in self._binding.popup.class_list

    @property
    def visible(self) -> bool:
        return self._binding is not None and self._binding.visible

    # -- lifecycle ---------------------------------------------------------

    def bind(self, surface: Element) -> OverlayBinding:
        """Bind the overlay to *surface*, replacing any other binding.

        Raises
        ------
        SurfaceKindError
            If *surface* is not an editable surface.
        """
        if self._binding is not None and self._binding.surface is surface:
            return self._binding
        if not is_surface(surface):
            raise SurfaceKindError(f"cannot bind the overlay to {surface!r}")
        if self._binding is not None:
            self.teardown()

        settings = self._settings
        document = self._document
        container = _element(
            document,
            "div",
            CONTAINER_CLASS,
            style={
                "position": "fixed",
                "z-index": str(settings.z_index),
                "display": "none",
                "right": "auto",
                "bottom": "auto",
                "left": "auto",
                "top": "auto",
            },
        )
        badge = _element(document, "div", BADGE_CLASS)
        logo = _element(document, "div", LOGO_CLASS)
        logo.append_child(document.create_element("img", {
            "src": self._assets.url_for(settings.logo_asset),
            "width": "16",
            "height": "16",
            "style": "display:block;",
        }))
        status = _element(document, "span", text=CLEAN_STATUS)
        badge.append(logo, status)
        popup = _element(
            document,
            "div",
            POPUP_CLASS,
            style={
                "top": "auto",
                "right": "0",
                "bottom": f"{settings.popup_offset:g}px",
                "left": "auto",
            },
        )
        container.append(popup, badge)

        binding = OverlayBinding(
            surface=surface,
            anchor=resolve_anchor(surface, document.default_view),
            container=container,
            badge=badge,
            status=status,
            popup=popup,
        )

        def toggle_popup(event: Event) -> None:
            event.stop_propagation()
            popup.class_list.toggle(POPUP_VISIBLE_CLASS)

        def close_popup(_event: Event) -> None:
            popup.class_list.remove(POPUP_VISIBLE_CLASS)

        binding.disposers.extend([
            listen(badge, "click", toggle_popup),
            listen(document, "click", close_popup),
            listen(popup, "click", lambda event: self._on_popup_click(binding, event)),
        ])
        self._binding = binding
        self._render(binding)
        document.body.append_child(container)

        synchronizer = PositionSynchronizer(
            binding,
            self._clock,
            document.default_view,
            margin=settings.margin,
            badge_size=settings.badge_size,
            on_detached=lambda: self._teardown_binding(binding),
        )
        binding.synchronizer = synchronizer
        synchronizer.install()
        log.debug("Overlay bound to %s", describe(surface))
        return binding

    def update_shield(
        self,
        surface: Element,
        findings: Iterable[Finding | Mapping[str, str]],
    ) -> ShieldState:
        """Record the latest scan of *surface* and re-render."""
        binding = self.bind(surface)
        binding.findings = freeze_findings(findings)
        self._render(binding)
        return self.state

    def teardown(self) -> None:
        """Remove the overlay and every hook it installed; idempotent."""
        if self._binding is not None:
            self._teardown_binding(self._binding)

    def release(self, surface: Element) -> None:
        """Tear down only when bound to *surface*."""
        if self._binding is not None and self._binding.surface is surface:
            self._teardown_binding(self._binding)

    def request_position_sync(self) -> None:
        if self._binding is not None and self._binding.synchronizer is not None:
            self._binding.synchronizer.request()

    def _teardown_binding(self, binding: OverlayBinding) -> None:
        if binding.released:
            return
        binding.released = True
        if self._binding is binding:
            self._binding = None
        if binding.synchronizer is not None:
            binding.synchronizer.release()
        for dispose in binding.disposers:
            dispose()
        binding.disposers.clear()
        binding.container.remove()
        log.debug("Overlay released from %s", describe(binding.surface))

    # -- redaction controls ------------------------------------------------

    def fix(self, finding: Finding) -> RedactionOutcome:
        """Redact one occurrence of *finding* in the bound surface."""
        if self._binding is None:
            return RedactionOutcome.NOT_FOUND
        return self._redactor.redact(self._binding.surface, finding.value, finding.type)

    def fix_all(self) -> list[RedactionOutcome]:
        """Redact every current finding, iterating a snapshot of the list."""
        if self._binding is None:
            return []
        surface = self._binding.surface
        snapshot = list(self._binding.findings)
        return [self._redactor.redact(surface, f.value, f.type) for f in snapshot]

    def _on_popup_click(self, binding: OverlayBinding, event: Event) -> None:
        target = event.target
        if binding.released or not isinstance(target, Element):
            return
        if FIX_CLASS in target.class_list:
            self._redactor.redact(
                binding.surface,
                target.dataset.get("val", ""),
                target.dataset.get("type", ""),
            )
        elif FIX_ALL_CLASS in target.class_list:
            self.fix_all()

    # -- rendering ---------------------------------------------------------

    def _render(self, binding: OverlayBinding) -> None:
        if binding.findings:
            self._render_alert(binding)
        else:
            self._render_clean(binding)

    def _render_clean(self, binding: OverlayBinding) -> None:
        binding.badge.class_name = BADGE_CLASS
        binding.status.text_content = CLEAN_STATUS
        binding.banner = None
        binding.popup.class_list.remove(POPUP_VISIBLE_CLASS)
        binding.popup.replace_children(_element(
            self._document,
            "div",
            HEADER_CLASS,
            text="No issues found",
            style={"justify-content": "center", "color": "#2ecc71"},
        ))

    def _render_alert(self, binding: OverlayBinding) -> None:
        document = self._document
        count = len(binding.findings)
        binding.badge.class_name = f"{BADGE_CLASS} {DANGER_CLASS}"
        binding.status.text_content = display_count(count, self._settings.count_cap)
        binding.banner = self._rng.choice(ALERT_MESSAGES)

        controls = _element(document, "div", style={"display": "flex", "align-items": "center"})
        controls.append(
            _element(document, "button", FIX_ALL_CLASS, text="Fix All"),
            _element(document, "span", text=f"{count} Issues", style={"color": "#e74c3c"}),
        )
        header = _element(document, "div", HEADER_CLASS)
        header.append(_element(document, "span", text="Security Alert"), controls)

        issues = _element(document, "ul", LIST_CLASS)
        for finding in binding.findings:
            fix_button = _element(document, "button", FIX_CLASS, text="Fix")
            fix_button.dataset.update(val=finding.value, type=finding.type)
            row = _element(document, "div", style={
                "display": "flex",
                "justify-content": "space-between",
                "align-items": "center",
                "margin-bottom": "4px",
            })
            row.append(_element(document, "span", ITEM_TYPE_CLASS, text=finding.type), fix_button)
            item = _element(document, "li", ITEM_CLASS)
            item.append(row, _element(document, "span", ITEM_VALUE_CLASS, text=finding.value))
            issues.append_child(item)

        binding.popup.replace_children(
            _element(document, "div", BANNER_CLASS, text=binding.banner),
            header,
            issues,
        )


def _element(
    document: Document,
    tag: str,
    class_name: str | None = None,
    *,
    text: str | None = None,
    style: Mapping[str, str] | None = None,
) -> Element:
    element = document.create_element(tag)
    if class_name:
        element.class_name = class_name
    if style:
        element.style.update(style)
    if text:
        element.text_content = text
    return element
