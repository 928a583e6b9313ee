"""Token recognizers: the smallest lexical units of the grammar.

Every recognizer has the signature ``recognizer(source, pos)`` and either
returns ``(matched_text, new_pos)`` with ``new_pos > pos`` or raises
:class:`NoMatch` without consuming anything. Delimiter recognizers skip
whitespace in front of the delimiter; the skipped whitespace is part of the
consumed span but not of ``matched_text``.
"""

import re

from .tokens import NoMatch

WHITESPACE = " \t\r\n"

_WHITESPACE_PATTERN = re.compile(f"[{WHITESPACE}]+")
_WORD_PATTERN = re.compile(r"[A-Za-z0-9]+")
_COMMENT_DELIMITER_PATTERN = re.compile(r"-{2,100}")
_EQUALS_PATTERN = re.compile(f"[{WHITESPACE}]*=[{WHITESPACE}]*")


def skip_whitespace(source, pos):
    """Return the offset of the first non-whitespace character at or after ``pos``."""
    match = _WHITESPACE_PATTERN.match(source, pos)
    return match.end() if match else pos


def at_end(source, pos):
    """True when only whitespace remains."""
    return skip_whitespace(source, pos) >= len(source)


def literal(expected):
    """Recognizer for a fixed string at exactly ``pos``."""

    def recognize(source, pos):
        if source.startswith(expected, pos):
            return expected, pos + len(expected)
        raise NoMatch(pos, repr(expected))

    recognize.__name__ = f"literal({expected!r})"
    return recognize


def delimiter(expected):
    """Recognizer for a structural delimiter, tolerating whitespace in front of it."""

    def recognize(source, pos):
        start = skip_whitespace(source, pos)
        if source.startswith(expected, start):
            return expected, start + len(expected)
        raise NoMatch(pos, repr(expected))

    recognize.__name__ = f"delimiter({expected!r})"
    return recognize


chevron_open = delimiter("<")
chevron_close = delimiter(">")
end_tag_open = delimiter("</")
self_closing_close = delimiter("/>")
bang_open = delimiter("<!")


def whitespace1(source, pos):
    match = _WHITESPACE_PATTERN.match(source, pos)
    if match is None:
        raise NoMatch(pos, "whitespace")
    return match.group(), match.end()


def word(source, pos):
    """ASCII alphanumeric run: tag names, attribute names and bare values."""
    match = _WORD_PATTERN.match(source, pos)
    if match is None:
        raise NoMatch(pos, "name")
    return match.group(), match.end()


def comment_delimiter(source, pos):
    """A run of 2 to 100 dashes."""
    match = _COMMENT_DELIMITER_PATTERN.match(source, pos)
    if match is None:
        raise NoMatch(pos, "comment delimiter")
    return match.group(), match.end()


def equals(source, pos):
    match = _EQUALS_PATTERN.match(source, pos)
    if match is None:
        raise NoMatch(pos, "'='")
    return "=", match.end()


def quote(source, pos):
    if pos < len(source) and source[pos] in "\"'":
        return source[pos], pos + 1
    raise NoMatch(pos, "quote")


def quoted_string(source, pos):
    """A quoted run; returns the unquoted value. The closing quote must match the opening one."""
    opening, start = quote(source, pos)
    end = source.find(opening, start)
    if end == -1:
        raise NoMatch(pos, f"closing {opening}")
    return source[start:end], end + 1


def alt(*recognizers):
    """Try each recognizer in order; the first success wins."""

    def recognize(source, pos):
        for recognizer in recognizers:
            try:
                return recognizer(source, pos)
            except NoMatch:
                continue
        raise NoMatch(pos, " or ".join(r.__name__ for r in recognizers))

    recognize.__name__ = "alt(" + ", ".join(r.__name__ for r in recognizers) + ")"
    return recognize


def many0(recognizer):
    """Apply ``recognizer`` until it fails; returns the list of results (possibly empty)."""

    def recognize(source, pos):
        results = []
        while True:
            try:
                value, new_pos = recognizer(source, pos)
            except NoMatch:
                return results, pos
            results.append(value)
            pos = new_pos

    recognize.__name__ = f"many0({recognizer.__name__})"
    return recognize
