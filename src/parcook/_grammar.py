"""Grammar nodes and the session capability.

A grammar is a plain Python function that takes a session and returns its
terminal value. Each step of the grammar calls `session.match(node)` with one
of the grammar nodes defined here, and gets back what was matched. The
function decides its next step from that value using ordinary control flow.

The same grammar function runs under two drivers. The parse engine hands it a
session that consumes real input, and the invert engine hands it a session
that synthesizes text for a target value. Grammars never need to know which
one they are running under.

Nodes:
* Literal: exact text expected at the current position.
* Pattern: an anchored regular expression matched at the current position.
* Choice: ordered alternatives, the first that matches wins.
* Rule: a reference to another grammar function.
"""

__all__ = [
    "ANCHORS",
    "Literal",
    "Pattern",
    "Choice",
    "Rule",
    "rule",
    "as_node",
    "candidates",
    "PatternMatch",
    "Session",
]

import functools
import re
from dataclasses import dataclass

import parcook


# Source prefixes accepted as start anchors for Pattern
ANCHORS = ("^", "$", "\\A")


@dataclass(frozen=True)
class Literal:
    """Exact text that must appear at the start of the remaining input.

    The empty string always matches and consumes nothing.
    """
    text: str

    def __post_init__(self):
        if not isinstance(self.text, str):
            raise parcook.GrammarError(f"Literal text must be a str, got {type(self.text).__name__}")


class Pattern:
    """Regular expression anchored to the start of the remaining input.

    Args:
        regex: (str | re.Pattern) Expression source or compiled expression
        flags: (int) Extra `re` flags to compile with

    Raises:
        GrammarError: If the expression does not begin with an anchor
    """

    __slots__ = ("regex",)

    def __init__(self, regex, flags=0):
        if isinstance(regex, re.Pattern):
            if flags:
                regex = re.compile(regex.pattern, regex.flags | flags)
        elif isinstance(regex, str):
            regex = re.compile(regex, flags)
        else:
            raise parcook.GrammarError(f"Pattern needs a str or re.Pattern, got {type(regex).__name__}")

        if not isinstance(regex.pattern, str):
            raise parcook.GrammarError("Pattern must match text, not bytes")
        if not regex.pattern.startswith(ANCHORS):
            raise parcook.GrammarError(f"Pattern must be anchored with '^' or '$': {regex.pattern!r}")
        self.regex = regex

    def __eq__(self, other):
        return isinstance(other, Pattern) and other.regex == self.regex

    def __hash__(self):
        return hash(self.regex)

    def __repr__(self):
        return f"Pattern({self.regex.pattern!r})"


class Choice:
    """Ordered alternatives tried one after another.

    Alternatives may be nodes or anything `as_node` accepts. They are
    converted once here, so running the grammar never inspects raw values.

    Args:
        *alternatives: Literal, Pattern or Rule nodes (or raw str, compiled
            regex, or grammar functions)

    Raises:
        GrammarError: If there are no alternatives or one is itself a Choice
    """

    __slots__ = ("alternatives",)

    def __init__(self, *alternatives):
        nodes = []
        for alternative in alternatives:
            node = as_node(alternative)
            if isinstance(node, Choice):
                raise parcook.GrammarError("Choice cannot contain another Choice, wrap it in a Rule")
            nodes.append(node)
        if not nodes:
            raise parcook.GrammarError("Choice needs at least one alternative")
        self.alternatives = tuple(nodes)

    def __eq__(self, other):
        return isinstance(other, Choice) and other.alternatives == self.alternatives

    def __hash__(self):
        return hash(self.alternatives)

    def __repr__(self):
        return f"Choice({', '.join(repr(n) for n in self.alternatives)})"


class Rule:
    """Reference to another grammar function.

    Matching a Rule runs the referenced function with its own session and
    adopts its terminal value as the match value. Calling a Rule directly with
    the current session runs it inline, sharing that session.

    Args:
        factory: (callable) Grammar function taking a session
    """

    def __init__(self, factory):
        if not callable(factory):
            raise parcook.GrammarError(f"Rule needs a callable grammar, got {factory!r}")
        self.factory = factory
        functools.update_wrapper(self, factory)

    def __call__(self, session):
        return self.factory(session)

    @property
    def name(self):
        return getattr(self.factory, "__qualname__", repr(self.factory))

    def __eq__(self, other):
        return isinstance(other, Rule) and other.factory is self.factory

    def __hash__(self):
        return hash(self.factory)

    def __repr__(self):
        return f"Rule({self.name})"


def rule(func):
    """Decorate a grammar function so it can be used as a Rule node."""
    return Rule(func)


def as_node(item):
    """Convert a raw grammar item into a node.

    Strings become Literal, compiled regular expressions become Pattern,
    lists and tuples become Choice, and other callables become Rule. Nodes
    are returned unchanged. Plain strings are never treated as patterns, use
    `Pattern` explicitly for those.

    Args:
        item: Node or raw item to convert

    Returns:
        Literal | Pattern | Choice | Rule: The converted node

    Raises:
        GrammarError: If the item has no node equivalent
    """
    match item:
        case Literal() | Pattern() | Choice() | Rule():
            return item
        case str():
            return Literal(item)
        case re.Pattern():
            return Pattern(item)
        case list() | tuple():
            return Choice(*item)
    if callable(item):
        return Rule(item)
    raise parcook.GrammarError(f"Cannot use {item!r} as a grammar node")


def candidates(node):
    """Alternatives to try for a node, a bare node is a Choice of one."""
    if isinstance(node, Choice):
        return node.alternatives
    if isinstance(node, (Literal, Pattern, Rule)):
        return (node,)
    raise parcook.GrammarError(f"match() needs a grammar node, got {node!r}")


class PatternMatch:
    """Value returned for a successful Pattern match.

    Behaves like a short sequence: index 0 is the full matched text and the
    following items are the capture groups, so `text, = session.match(p)` or
    `session.match(p)[0]` both work.

    Attributes:
        text: (str) Full matched text
        groups: (tuple) Positional capture groups (None when not taking part)
        named: (dict) Named capture groups
        index: (int) Offset of the match in the remaining input, always 0
    """

    __slots__ = ("text", "groups", "named", "index")

    def __init__(self, text, groups=(), named=None, index=0):
        self.text = text
        self.groups = tuple(groups)
        self.named = dict(named) if named else {}
        self.index = index

    @classmethod
    def from_match(cls, match):
        return cls(match[0], match.groups(), match.groupdict(), match.start())

    def __getitem__(self, index):
        return (self.text, *self.groups)[index]

    def __iter__(self):
        yield self.text
        yield from self.groups

    def __len__(self):
        return 1 + len(self.groups)

    def __eq__(self, other):
        if not isinstance(other, PatternMatch):
            return NotImplemented
        return (self.text, self.groups, self.named, self.index) == (
            other.text, other.groups, other.named, other.index)

    def __repr__(self):
        return f"PatternMatch({self.text!r}, groups={self.groups!r})"


class Session:
    """Capability a grammar function uses to request input.

    Engines subclass this. Grammar functions only ever call `match`.
    """

    def match(self, node):
        """Match a node at the current position and return the match value.

        Args:
            node (Literal | Pattern | Choice | Rule): What the grammar expects

        Returns:
            str | PatternMatch | object: The matched literal text, the pattern
            match, or the terminal value of a Rule
        """
        raise NotImplementedError
