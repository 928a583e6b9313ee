from .node import DEFAULT_CHARSET, FLAG_VALUE, Node, NodeType
from .parser import MiniHTML, StrictModeError, parse
from .serialize import to_html, to_test_format, to_tree
from .tokens import ParseError, UnclosedElementError

__all__ = [
    "DEFAULT_CHARSET",
    "FLAG_VALUE",
    "MiniHTML",
    "Node",
    "NodeType",
    "ParseError",
    "StrictModeError",
    "UnclosedElementError",
    "parse",
    "to_html",
    "to_test_format",
    "to_tree",
]
