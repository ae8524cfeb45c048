"""Small grammars built only from the engine primitives.

These get no special treatment from either engine. They are ordinary rules
and patterns, so they behave the same way when parsing and inverting.
"""

__all__ = ["END", "has", "optional", "look_ahead", "sequence", "must_end", "has_more"]

import re

import parcook


# Zero-width end of input. `$` would also match before a trailing newline.
END = parcook.Pattern(r"^\Z")

_ABSENT = object()


def has(item):
    """Rule that matches item when present and reports whether it did.

    Args:
        item: Node (or raw item accepted by `as_node`) to probe for

    Returns:
        Rule: Grammar returning True when item matched, False otherwise
    """
    node = parcook.as_node(item)

    def present(session):
        session.match(node)
        return True

    present.__qualname__ = f"present({node!r})"
    choice = parcook.Choice(present, "")

    def has_item(session):
        return session.match(choice) is True

    has_item.__qualname__ = f"has({node!r})"
    return parcook.Rule(has_item)


def optional(*items):
    """Rule that matches the first of items that fits, or nothing.

    Args:
        *items: Alternatives, as accepted by `Choice`

    Returns:
        Rule: Grammar returning the match value, or None when none matched
    """
    choice = parcook.Choice(*items, _absent)

    def optional_items(session):
        value = session.match(choice)
        return None if value is _ABSENT else value

    optional_items.__qualname__ = f"optional({', '.join(repr(n) for n in choice.alternatives[:-1])})"
    return parcook.Rule(optional_items)


def _absent(session):
    return _ABSENT


def look_ahead(regex, flags=0):
    """Pattern that checks regex matches next without consuming anything.

    A leading anchor on regex is optional. Capture groups inside are still
    reported in the pattern match.

    Args:
        regex (str | re.Pattern): Expression to look for
        flags (int): Extra `re` flags

    Returns:
        Pattern: Zero-width anchored pattern
    """
    if isinstance(regex, re.Pattern):
        source = regex.pattern
        flags |= regex.flags
    else:
        source = regex
    for anchor in ("^", "\\A"):
        if source.startswith(anchor):
            source = source[len(anchor):]
            break
    return parcook.Pattern(f"^(?={source})", flags)


def sequence(*items):
    """Rule that matches each item in order.

    Args:
        *items: Nodes or raw items accepted by `as_node`

    Returns:
        Rule: Grammar returning the list of match values
    """
    nodes = [parcook.as_node(item) for item in items]

    def steps(session):
        return [session.match(node) for node in nodes]

    steps.__qualname__ = f"sequence({', '.join(repr(n) for n in nodes)})"
    return parcook.Rule(steps)


@parcook.rule
def must_end(session):
    """Fail unless all input has been consumed."""
    session.match(END)


_at_end = has(END)


@parcook.rule
def has_more(session):
    """Report whether any input remains."""
    return not session.match(_at_end)
