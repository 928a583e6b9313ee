"""Attribute recognizer.

An attribute is preceded by at least one whitespace character and takes one
of three forms, tried in this order:

    name="value"  or  name='value'
    name=value     (alphanumeric value)
    name           (flag, stored as FLAG_VALUE)

The quoted form goes first so that ``name="a=b"`` is not split on the
embedded ``=``.
"""

import re

from .node import FLAG_VALUE
from .tokenizer import WHITESPACE, alt, equals, quoted_string, whitespace1, word
from .tokens import MALFORMED_ATTRIBUTE, Locator, MalformedAttribute, NoMatch

# A bare value must be followed by whitespace, the end of the tag or the end of input.
_BARE_VALUE_END_PATTERN = re.compile(f"[{WHITESPACE}]|/?>|$")
# The span dropped for a malformed value: everything up to whitespace, ">" or "/>".
_MALFORMED_VALUE_PATTERN = re.compile(f"(?:(?!/>)[^{WHITESPACE}>])*")


def quoted_attribute(source, pos):
    name, pos = word(source, pos)
    _, pos = equals(source, pos)
    value, pos = quoted_string(source, pos)
    return (name, value), pos


def bare_attribute(source, pos):
    name, pos = word(source, pos)
    _, pos = equals(source, pos)
    value, end = word(source, pos)
    if not _BARE_VALUE_END_PATTERN.match(source, end):
        raise NoMatch(end, "end of attribute value")
    return (name, value), end


_valued_attribute = alt(quoted_attribute, bare_attribute)


def attribute(source, pos):
    """Recognize one attribute, leading whitespace included.

    Returns ``((name, value), new_pos)``. Raises :class:`MalformedAttribute`
    when ``name=`` is followed by no acceptable value, and :class:`NoMatch`
    when there is no attribute at ``pos`` at all.
    """
    _, start = whitespace1(source, pos)
    try:
        return _valued_attribute(source, start)
    except NoMatch:
        pass

    try:
        name, after_name = word(source, start)
    except NoMatch:
        raise NoMatch(pos, "attribute") from None
    try:
        _, value_start = equals(source, after_name)
    except NoMatch:
        return (name, FLAG_VALUE), after_name

    end = _MALFORMED_VALUE_PATTERN.match(source, value_start).end()
    raise MalformedAttribute(start, name, end)


def attribute_list(source, pos, locator=None):
    """Collect attributes until none matches.

    Returns ``(attributes, errors, new_pos)``. Duplicate names keep the last
    value. Malformed attributes are dropped and reported in ``errors`` as
    ParseError records; the caller decides whether to surface them, since the
    enclosing tag may still fail to match. Pass the parse's Locator as
    ``locator`` to keep line counting incremental.
    """
    attributes = {}
    errors = []
    while True:
        try:
            (name, value), pos = attribute(source, pos)
        except MalformedAttribute as exc:
            if locator is None:
                locator = Locator(source)
            errors.append(locator.error(exc.pos, MALFORMED_ATTRIBUTE, f"dropped attribute {exc.name!r}"))
            pos = exc.end
            continue
        except NoMatch:
            return attributes, errors, pos
        attributes[name] = value
