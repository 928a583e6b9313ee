"""Error records and control-flow exceptions shared by the parser layers."""

MALFORMED_ATTRIBUTE = "malformed-attribute"
UNRECOGNIZED_UNIT = "unrecognized-unit"
UNCLOSED_ELEMENT = "unclosed-element"


class NoMatch(Exception):
    """A recognizer could not match at the given offset. Nothing was consumed."""

    def __init__(self, pos, expected=None):
        super().__init__(pos, expected)
        self.pos = pos
        self.expected = expected

    def __str__(self):
        if self.expected:
            return f"expected {self.expected} at offset {self.pos}"
        return f"no match at offset {self.pos}"


class MalformedAttribute(NoMatch):
    """``name=`` was recognized but the value is in none of the accepted forms.

    ``pos`` is the offset of the attribute name and ``end`` the offset just
    past the rejected value.
    """

    def __init__(self, pos, name, end):
        super().__init__(pos, "attribute value")
        self.name = name
        self.end = end

    def __str__(self):
        return f"malformed value for attribute {self.name!r} at offset {self.pos}"


class ParseError:
    """Represents a parse error with location information."""

    __slots__ = ("code", "column", "line", "message")

    def __init__(self, code, line=None, column=None, message=None):
        self.code = code
        self.line = line
        self.column = column
        self.message = message or code

    @classmethod
    def at(cls, source, pos, code, message=None):
        """Build an error for offset ``pos`` of ``source`` (1-based line and column)."""
        line, column = Locator(source).locate(pos)
        return cls(code, line=line, column=column, message=message)

    def __repr__(self):
        if self.line is not None and self.column is not None:
            return f"ParseError({self.code!r}, line={self.line}, column={self.column})"
        return f"ParseError({self.code!r})"

    def __str__(self):
        if self.line is not None and self.column is not None:
            if self.message != self.code:
                return f"({self.line},{self.column}): {self.code} - {self.message}"
            return f"({self.line},{self.column}): {self.code}"
        if self.message != self.code:
            return f"{self.code} - {self.message}"
        return self.code

    def __eq__(self, other):
        if not isinstance(other, ParseError):
            return NotImplemented
        return self.code == other.code and self.line == other.line and self.column == other.column

    __hash__ = None  # Unhashable since we define __eq__


class Locator:
    """Turns offsets into one source into 1-based (line, column) pairs.

    The last located offset is remembered and only the newlines between it
    and the next offset are counted, so a parse that reports errors in
    document order locates all of them in one pass over the source.
    """

    __slots__ = ("line", "line_start", "pos", "source")

    def __init__(self, source):
        self.source = source
        self.pos = 0
        self.line = 1
        self.line_start = 0

    def locate(self, pos):
        source = self.source
        if pos >= self.pos:
            newlines = source.count("\n", self.pos, pos)
            if newlines:
                self.line += newlines
                self.line_start = source.rfind("\n", self.pos, pos) + 1
        else:
            newlines = source.count("\n", pos, self.pos)
            if newlines:
                self.line -= newlines
                self.line_start = source.rfind("\n", 0, pos) + 1
        self.pos = pos
        return self.line, pos - self.line_start + 1

    def error(self, pos, code, message=None):
        line, column = self.locate(pos)
        return ParseError(code, line=line, column=column, message=message)


class UnclosedElementError(Exception):
    """An element body reached the end of the document before its end tag."""

    def __init__(self, tag_name, error):
        super().__init__(str(error))
        self.tag_name = tag_name
        self.error = error
