from . import node as dom
from .node import NodeType
from .recognizers import NODE_RECOGNIZERS, end_tag, start_tag
from .tokenizer import at_end, skip_whitespace
from .tokens import UNCLOSED_ELEMENT, UNRECOGNIZED_UNIT, Locator, NoMatch, UnclosedElementError


class TreeBuilder:
    """Drives the node recognizers over a document.

    Open elements are kept on an explicit stack with the synthetic root at the
    bottom. At each step the builder first tries to close the current element,
    then the recognizers in NODE_RECOGNIZERS order, then a start tag, which
    pushes a new element whose body is read by the same loop. The root is
    closed by the end of input; any other element reaching the end of input
    raises UnclosedElementError.

    Warnings go to ``on_error``, a callable taking a ParseError. They are
    placed with one Locator per parse, so reporting stays linear in the size
    of the source.
    """

    __slots__ = ("debug_enabled", "locator", "on_error", "open_elements", "pos", "source")

    def __init__(self, source, *, on_error=None, debug=False, locator=None):
        self.source = source
        self.locator = locator if locator is not None else Locator(source)
        self.on_error = on_error
        self.debug_enabled = bool(debug)
        self.pos = 0
        # (node, offset of its opening "<") pairs
        self.open_elements = []

    def debug(self, message, indent=0):
        if self.debug_enabled:
            print(f"{' ' * indent}{message}")

    def parse_error(self, error):
        self.debug(f"parse error: {error}", indent=2 * len(self.open_elements))
        if self.on_error is not None:
            self.on_error(error)

    def build(self):
        """Parse the whole source; returns the ROOT node."""
        root = dom.root()
        self.pos = 0
        self.open_elements = [(root, 0)]
        self.debug("#root")
        self._run()
        return root

    def build_element(self, pos):
        """Parse one open/close element starting at ``pos``; returns ``(element, new_pos)``."""
        pending = []
        element, new_pos = start_tag(self.source, pos, pending, self.locator)
        self._flush(pending)
        self.pos = new_pos
        self.open_elements = [(element, skip_whitespace(self.source, pos))]
        self.debug(f"<{element.tag_name}>")
        self._run()
        return element, self.pos

    def _run(self):
        source = self.source
        open_elements = self.open_elements
        while open_elements:
            current, opened_at = open_elements[-1]
            if current.node_type is NodeType.ROOT:
                if at_end(source, self.pos):
                    self.pos = len(source)
                    open_elements.pop()
                    continue
            else:
                try:
                    _, self.pos = end_tag(source, self.pos, current.tag_name)
                except NoMatch:
                    pass
                else:
                    open_elements.pop()
                    self.debug(f"</{current.tag_name}>", indent=2 * len(open_elements))
                    continue
                if at_end(source, self.pos):
                    error = self.locator.error(opened_at, UNCLOSED_ELEMENT, f"<{current.tag_name}> is never closed")
                    self.debug(f"parse error: {error}", indent=2 * len(open_elements))
                    raise UnclosedElementError(current.tag_name, error)
            self._step(current)

    def _step(self, parent):
        source = self.source
        pos = self.pos
        indent = 2 * len(self.open_elements)
        pending = []

        for recognizer in NODE_RECOGNIZERS:
            try:
                child, new_pos = recognizer(source, pos, pending, self.locator)
            except NoMatch:
                continue
            self._flush(pending)
            parent.append_child(child)
            self.pos = new_pos
            self.debug(repr(child), indent=indent)
            return

        try:
            child, new_pos = start_tag(source, pos, pending, self.locator)
        except NoMatch:
            self._skip_unit()
            return
        self._flush(pending)
        parent.append_child(child)
        self.open_elements.append((child, skip_whitespace(source, pos)))
        self.pos = new_pos
        self.debug(f"<{child.tag_name}>", indent=indent)

    def _skip_unit(self):
        """Drop what no recognizer accepts: a "<...>" run or text up to the next "<"."""
        source = self.source
        start = skip_whitespace(source, self.pos)
        if source.startswith("<", start):
            next_open = source.find("<", start + 1)
            if next_open == -1:
                close = source.find(">", start + 1)
            else:
                close = source.find(">", start + 1, next_open)
            if close != -1:
                end = close + 1
            elif next_open != -1:
                end = next_open
            else:
                end = len(source)
        else:
            end = source.find("<", start)
            if end == -1:
                end = len(source)
        self.parse_error(
            self.locator.error(start, UNRECOGNIZED_UNIT, f"skipped {source[start:end]!r}"),
        )
        self.pos = end

    def _flush(self, pending):
        for error in pending:
            self.parse_error(error)
