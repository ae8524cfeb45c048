"""Invert engine that synthesizes text for a target value.

Inversion runs the same grammar functions as parsing, but there is no input
to consume. Instead the `InvertSession` builds a list of output components:

* Literals are written out as they are.
* Patterns cannot be answered locally, so an empty placeholder component is
  written and the grammar receives an opaque `SlotHandle` in place of the
  matched text.
* Rules are inverted recursively for the same needle.

When the grammar returns its terminal value, that value is unified with the
needle. Keys must be the same, plain values must be equal, and any slot
handle takes the needle's value if it satisfies the slot's pattern. The
needle's text is then written into the placeholder component.

All sessions of one inversion share a single slot table. When a nested
rule's components are spliced into its parent, the slots it created move
with them, so a handle returned by a helper rule can still be filled by the
rule that uses it.

Alternatives are tried once, in declared order. The first branch that fully
reproduces the needle wins and ends the whole walk.
"""

__all__ = [
    "PlaceholderSlot",
    "SlotHandle",
    "Complete",
    "Partial",
    "InvertSession",
    "invert",
    "invert_outcome",
]

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass

import parcook

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlaceholderSlot:
    """Output position waiting for text from the needle.

    Attributes:
        index: (int) Position in the output components of the session
            currently holding the slot
        pattern: (re.Pattern) Expression the needle's value must match
    """
    index: int
    pattern: re.Pattern


class SlotHandle:
    """Opaque stand-in for the text a Pattern would have matched.

    Attributes:
        table: (list[PlaceholderSlot]) Slot table of the inversion that
            created the handle
        index: (int) Position of the slot in that table
    """

    __slots__ = ("table", "index")

    def __init__(self, table, index):
        self.table = table
        self.index = index

    def __repr__(self):
        return f"SlotHandle({self.index})"


@dataclass(frozen=True)
class Complete:
    """Grammar reproduced the needle, `components` join into the text."""
    components: tuple

    @property
    def text(self) -> str:
        return "".join(self.components)


@dataclass(frozen=True)
class Partial:
    """Grammar finished without a comparable value.

    This is how prefix rules without a mapping result take part in a larger
    inversion. The parent splices in `components` and receives `value`.
    """
    components: tuple
    value: object = None


# Not Exception subclasses, so `except Exception` in grammar code never
# catches them.
class _Resolved(BaseException):
    """Unwinds a grammar function once a nested rule reproduced the needle."""


class _Unresolved(BaseException):
    """Unwinds a grammar function when no alternative could be inverted."""


class InvertSession(parcook.Session):
    """Session that writes output components instead of consuming input.

    Args:
        needle (Mapping): Target value the grammar should produce
        slots (list[PlaceholderSlot] | None): Slot table shared with the
            parent session, a new table when None

    Attributes:
        needle: (Mapping) Target value the grammar should produce
        components: (list[str]) Output text fragments in order
        slots: (list[PlaceholderSlot]) Slot table for the whole inversion
        owned: (list[int]) Slot table positions whose placeholders are in
            this session's components
    """

    def __init__(self, needle, slots=None):
        self.needle = needle
        self.components = []
        self.slots = [] if slots is None else slots
        self.owned = []

    def match(self, node):
        """Produce text for the first alternative of node that can be inverted.

        Args:
            node (Literal | Pattern | Choice | Rule): What the grammar expects

        Returns:
            str | PatternMatch | object: The literal text, a pattern match
            wrapping a slot handle, or the value of a partial rule
        """
        for candidate in parcook.candidates(node):
            match candidate:
                case parcook.Literal(text=text):
                    self.components.append(text)
                    return text
                case parcook.Pattern(regex=regex):
                    handle = SlotHandle(self.slots, len(self.slots))
                    self.slots.append(PlaceholderSlot(len(self.components), regex))
                    self.owned.append(handle.index)
                    self.components.append("")
                    return parcook.PatternMatch(handle)
                case parcook.Rule():
                    child = InvertSession(self.needle, self.slots)
                    outcome = _invert(child, candidate)
                    if outcome is None:
                        continue
                    self._splice(child)
                    if isinstance(outcome, Complete):
                        raise _Resolved()
                    return outcome.value
        raise _Unresolved()

    def _splice(self, child):
        """Append a child session's components and take over its slots."""
        offset = len(self.components)
        for number in child.owned:
            slot = self.slots[number]
            self.slots[number] = PlaceholderSlot(slot.index + offset, slot.pattern)
            self.owned.append(number)
        self.components.extend(child.components)

    def resolve(self, value):
        """Unify the grammar's terminal value with the needle.

        Values that are not mappings have nothing to compare, so they give a
        Partial outcome carrying the value.

        Args:
            value: Terminal value returned by the grammar function

        Returns:
            Complete | Partial | None: Outcome for this grammar
        """
        if not isinstance(value, Mapping):
            return Partial(tuple(self.components), value)
        if set(value) != set(self.needle):
            log.debug("Keys %s do not match needle keys %s", sorted(value), sorted(self.needle))
            return None

        fills = {}
        for key, expected in self.needle.items():
            actual = value[key]
            if isinstance(actual, parcook.PatternMatch):
                actual = actual.text
            if isinstance(actual, SlotHandle):
                # Handles from another inversion, or from a branch that was
                # never spliced in here, have no component to fill.
                if actual.table is not self.slots or actual.index not in self.owned:
                    return None
                slot = self.slots[actual.index]
                text = str(expected)
                if slot.pattern.fullmatch(text) is None:
                    log.debug("Needle %s=%r does not match %r", key, text, slot.pattern.pattern)
                    return None
                if fills.setdefault(slot.index, text) != text:
                    return None
            elif actual != expected:
                return None

        for index, text in fills.items():
            self.components[index] = text
        return Complete(tuple(self.components))


def invert(needle, computation):
    """Synthesize the text that parses into needle with a grammar.

    Args:
        needle (Mapping): Target terminal value, with at least one key
        computation (Rule | callable): Grammar function taking a session

    Returns:
        str | None: The text, or None when the grammar cannot produce needle

    Raises:
        GrammarError: If needle is empty or not a mapping
    """
    outcome = invert_outcome(needle, computation)
    if isinstance(outcome, Complete):
        return outcome.text
    return None


def invert_outcome(needle, computation):
    """Invert a grammar and return the raw outcome.

    Same as `invert`, but a grammar without a comparable terminal value gives
    its Partial outcome instead of None.

    Args:
        needle (Mapping): Target terminal value, with at least one key
        computation (Rule | callable): Grammar function taking a session

    Returns:
        Complete | Partial | None: Inversion outcome
    """
    if not isinstance(needle, Mapping):
        raise parcook.GrammarError(f"Needle must be a mapping, got {type(needle).__name__}")
    if not needle:
        raise parcook.GrammarError("Needle must have at least one key")
    if not callable(computation):
        raise parcook.GrammarError(f"invert() needs a grammar function, got {computation!r}")
    return _invert(InvertSession(needle), computation)


def _invert(session, computation):
    try:
        value = computation(session)
    except _Resolved:
        log.debug("Needle resolved inside %r", computation)
        return Complete(tuple(session.components))
    except (_Unresolved, parcook.SemanticFailure):
        return None
    return session.resolve(value)
