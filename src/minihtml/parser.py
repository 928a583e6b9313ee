"""Minimal minihtml parser entry point."""

from .treebuilder import TreeBuilder


class StrictModeError(Exception):
    """Raised in strict mode on the first parse error."""

    def __init__(self, error):
        super().__init__(str(error))
        self.error = error


class MiniHTML:
    """Parse ``html`` into a tree.

    - collect_errors: keep warnings (malformed attributes, skipped units) in ``errors``
    - strict: raise StrictModeError on the first warning instead of recovering
    - debug: print a trace of the recognized units

    An element left open at the end of the document raises
    UnclosedElementError in every mode; no partial tree is returned.
    """

    __slots__ = ("debug", "errors", "root", "strict")

    def __init__(self, html, *, collect_errors=False, strict=False, debug=False):
        self.debug = bool(debug)
        self.strict = bool(strict)
        self.errors = []
        collect = collect_errors or strict

        def on_error(error):
            if collect:
                self.errors.append(error)
            if self.strict:
                raise StrictModeError(error)

        builder = TreeBuilder(html or "", on_error=on_error, debug=self.debug)
        self.root = builder.build()

    def to_test_format(self):
        return self.root.to_test_format()


def parse(html, *, on_error=None, debug=False):
    """Parse ``html`` and return the ROOT node.

    ``on_error`` receives each warning as a ParseError, e.g. ``errors.append``.
    """
    return TreeBuilder(html or "", on_error=on_error, debug=debug).build()
