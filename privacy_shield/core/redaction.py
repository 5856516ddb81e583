"""In-place redaction of a matched literal inside an editable surface.

The first occurrence of the literal is replaced with a placeholder token
built from the finding type. Each surface kind has a strategy chain:

- value fields: ``ValueAssignment``
- rich editables: ``RangeInsertion`` then ``WholeTextReplacement``

Strategies report whether they applied; the first one that does wins.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Protocol

from privacy_shield.core.surfaces import SurfaceKind, describe, surface_kind
from privacy_shield.dom import Element, Event
from privacy_shield.exceptions import SurfaceKindError

log = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_STRATEGIES",
    "RangeInsertion",
    "RedactionOutcome",
    "RedactionStrategy",
    "Redactor",
    "ValueAssignment",
    "WholeTextReplacement",
    "placeholder_token",
]

_WHITESPACE_RUN = re.compile(r"\s+")


def placeholder_token(finding_type: str) -> str:
    """Placeholder for *finding_type*: ``"credit card"`` -> ``"[SAFE_CREDIT_CARD]"``."""
    return f"[SAFE_{_WHITESPACE_RUN.sub('_', finding_type.upper())}]"


def _replace_first(text: str, original: str, placeholder: str) -> str | None:
    if not original or original not in text:
        return None
    return text.replace(original, placeholder, 1)


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


class RedactionOutcome(str, Enum):  # noqa: UP042
    """Which path performed a redaction."""

    VALUE_ASSIGNMENT = "value_assignment"
    RANGE_INSERTION = "range_insertion"
    FALLBACK = "fallback"
    NOT_FOUND = "not_found"

    @property
    def applied(self) -> bool:
        return self is not RedactionOutcome.NOT_FOUND


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


class RedactionStrategy(Protocol):
    outcome: RedactionOutcome

    def apply(self, surface: Element, original: str, placeholder: str) -> bool:
        """Replace the first occurrence; False when this strategy cannot."""
        ...


class ValueAssignment:
    """Rewrite a form control's value and announce it with ``input``."""

    outcome = RedactionOutcome.VALUE_ASSIGNMENT

    def apply(self, surface: Element, original: str, placeholder: str) -> bool:
        replaced = _replace_first(surface.value, original, placeholder)
        if replaced is None:
            return False
        surface.value = replaced
        surface.dispatch_event(Event("input", bubbles=True))
        return True


class RangeInsertion:
    """Select the occurrence inside one text node and insert over it.

    Going through ``insertText`` keeps the editor's undo history intact.
    Fails when no single text node holds the whole literal.
    """

    outcome = RedactionOutcome.RANGE_INSERTION

    def apply(self, surface: Element, original: str, placeholder: str) -> bool:
        if not original:
            return False
        document = surface.owner_document
        for node in surface.iter_text_nodes():
            index = node.data.find(original)
            if index < 0:
                continue
            surface.focus()
            rng = document.create_range()
            rng.set_start(node, index)
            rng.set_end(node, index + len(original))
            selection = document.get_selection()
            selection.remove_all_ranges()
            selection.add_range(rng)
            return document.exec_command("insertText", placeholder)
        return False


class WholeTextReplacement:
    """Rewrite the rendered text of the whole editor.

    Used when the literal straddles text-node boundaries. Inline structure
    is flattened and the change bypasses the undo history.
    """

    outcome = RedactionOutcome.FALLBACK

    def apply(self, surface: Element, original: str, placeholder: str) -> bool:
        replaced = _replace_first(surface.inner_text, original, placeholder)
        if replaced is None:
            return False
        surface.inner_text = replaced
        surface.dispatch_event(Event("input", bubbles=True))
        return True


DEFAULT_STRATEGIES: Mapping[SurfaceKind, Sequence[RedactionStrategy]] = {
    SurfaceKind.VALUE_FIELD: (ValueAssignment(),),
    SurfaceKind.RICH_EDITABLE: (RangeInsertion(), WholeTextReplacement()),
}


# ---------------------------------------------------------------------------
# Redactor
# ---------------------------------------------------------------------------


class Redactor:
    """Apply the strategy chain matching a surface's kind.

    Parameters
    ----------
    strategies:
        Optional override of the chain per ``SurfaceKind``.
    """

    __slots__ = ("_strategies",)

    def __init__(
        self,
        strategies: Mapping[SurfaceKind, Sequence[RedactionStrategy]] | None = None,
    ) -> None:
        self._strategies = dict(DEFAULT_STRATEGIES)
        if strategies:
            self._strategies.update(strategies)

    def redact(self, surface: Element, original: str, finding_type: str) -> RedactionOutcome:
        """Replace the first occurrence of *original* in *surface*.

        Returns
        -------
        RedactionOutcome
            The path that applied, or ``NOT_FOUND`` when the literal is no
            longer present (nothing is mutated and no event fires).

        Raises
        ------
        SurfaceKindError
            If *surface* is not an editable surface.
        """
        kind = surface_kind(surface)
        if kind is None:
            raise SurfaceKindError(f"cannot redact inside {surface!r}")
        placeholder = placeholder_token(finding_type)
        for strategy in self._strategies.get(kind, ()):
            if strategy.apply(surface, original, placeholder):
                if strategy.outcome is RedactionOutcome.FALLBACK:
                    log.debug(
                        "Literal spans text nodes in %s; replaced whole text",
                        describe(surface),
                    )
                return strategy.outcome
        log.debug("Nothing to redact in %s for %s", describe(surface), finding_type)
        return RedactionOutcome.NOT_FOUND
