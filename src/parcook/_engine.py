"""Parse engine that runs grammar functions against input text.

The engine hands a `ParseSession` to the grammar function. Every call to
`session.match` tries the requested alternatives in order against the start
of the remaining input. The first alternative that matches is consumed and
its value is returned to the grammar. Rules are run recursively with their
own session, and only adopt the consumed input when they succeed.

When nothing matches, the session raises an internal signal that unwinds the
grammar function back to the engine, which turns it into a `Failure`. Errors
from alternatives that were tried and failed are kept as nested errors so the
whole failure trace can be reported.

The engine doesn't know what grammars mean - it only provides matching.
"""

__all__ = ["ParseSession", "ParseError", "ParseResult", "Success", "Failure", "parse"]

import logging
from dataclasses import dataclass

import parcook

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseError:
    """Description of where and why a parse failed.

    This is a diagnostic record returned inside `Failure`, not an exception.

    Attributes:
        iteration: (int) Number of steps the computation completed before failing
        failed_node: (Literal | Pattern | Choice | Rule | SemanticFailure) The
            node passed to `match` that could not be satisfied, or the
            semantic failure raised by the grammar
        nested: (tuple[ParseError]) Failures of each Rule alternative that
            was tried, empty for literal and pattern mismatches
    """
    iteration: int
    failed_node: object
    nested: tuple = ()

    def format(self, indent: int = 0) -> str:
        """Format the failure and its nested failures as indented lines.

        Args:
            indent: Current indentation level

        Returns:
            Formatted trace, one line per failure
        """
        prefix = "  " * indent
        if isinstance(self.failed_node, parcook.SemanticFailure):
            line = f"{prefix}step {self.iteration}: rejected: {self.failed_node.message}"
        else:
            line = f"{prefix}step {self.iteration}: expected {self.failed_node!r}"
        lines = [line]
        for error in self.nested:
            lines.append(error.format(indent + 1))
        return "\n".join(lines)


class ParseResult:
    """Base for the outcome of `parse`."""
    success = False


@dataclass(frozen=True)
class Success(ParseResult):
    """Grammar completed, `value` is its terminal value."""
    remaining: str
    value: object = None
    success = True


@dataclass(frozen=True)
class Failure(ParseResult):
    """Grammar could not complete, `remaining` is where the failing step was."""
    remaining: str
    error: ParseError


# BaseException so `except Exception` in grammar code cannot swallow it
class _Mismatch(BaseException):
    """Unwinds a grammar function when a step has no matching alternative."""

    def __init__(self, error):
        self.error = error
        super().__init__(error)


class ParseSession(parcook.Session):
    """Session that consumes real input.

    Holds the parse state for one grammar invocation. Nested rules get
    their own session, so state is never shared between call frames.

    Args:
        remaining (str): Input text not consumed yet

    Attributes:
        remaining: (str) Input text not consumed yet
        iteration: (int) Number of steps matched so far
    """

    def __init__(self, remaining):
        self.remaining = remaining
        self.iteration = 0

    def match(self, node):
        """Match the first alternative of node that fits the remaining input.

        Args:
            node (Literal | Pattern | Choice | Rule): What the grammar expects

        Returns:
            str | PatternMatch | object: Matched literal, pattern match, or
            terminal value of the matched rule
        """
        nested = []
        for candidate in parcook.candidates(node):
            match candidate:
                case parcook.Literal(text=text):
                    if self.remaining.startswith(text):
                        self.remaining = self.remaining[len(text):]
                        return self._advance(text)
                case parcook.Pattern(regex=regex):
                    found = regex.match(self.remaining)
                    if found is not None:
                        self.remaining = self.remaining[found.end():]
                        return self._advance(parcook.PatternMatch.from_match(found))
                case parcook.Rule():
                    result = _run(self.remaining, candidate)
                    if result.success:
                        self.remaining = result.remaining
                        return self._advance(result.value)
                    nested.append(result.error)

        # Every alternative is tried even when a nested rule got far before
        # failing. Committing to such a rule instead is an open question.
        log.debug("No alternative of %r matched at step %d", node, self.iteration)
        raise _Mismatch(ParseError(self.iteration, node, tuple(nested)))

    def _advance(self, value):
        self.iteration += 1
        return value

    def __repr__(self):
        return f"ParseSession(step={self.iteration}, remaining={self.remaining[:20]!r})"


def parse(input, computation):
    """Parse input text with a grammar.

    Malformed input never raises, it is reported as a `Failure`. Malformed
    grammars raise `GrammarError`, and any other exception raised by grammar
    code propagates unchanged.

    Args:
        input (str): Text to parse
        computation (Rule | callable): Grammar function taking a session

    Returns:
        Success | Failure: Result with the unconsumed input
    """
    if not isinstance(input, str):
        raise TypeError(f"parse() input must be str, got {type(input).__name__}")
    if not callable(computation):
        raise parcook.GrammarError(f"parse() needs a grammar function, got {computation!r}")
    return _run(input, computation)


def _run(text, computation):
    session = ParseSession(text)
    try:
        value = computation(session)
    except _Mismatch as mismatch:
        return Failure(session.remaining, mismatch.error)
    except parcook.SemanticFailure as failure:
        log.debug("Semantic failure at step %d: %s", session.iteration, failure.message)
        return Failure(session.remaining, ParseError(session.iteration, failure))
    return Success(session.remaining, value)
