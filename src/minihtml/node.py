"""Tree model produced by the parser.

A tree is built from a single :class:`Node` class discriminated by
:class:`NodeType`. The set of variants is closed; consumers dispatch on
``node.node_type`` and the factory functions below are the only supported
way to build each variant.
"""

import enum

# Value stored for an attribute written without ``=value``.
FLAG_VALUE = "yes"

# Charset of a DOCUMENT node whose doctype declaration does not name one.
DEFAULT_CHARSET = "utf8"


class NodeType(enum.Enum):
    ROOT = "root"
    TEXT = "text"
    COMMENT = "comment"
    ELEMENT = "element"
    DOCUMENT = "document"


_CONTENT_TYPES = frozenset({NodeType.TEXT, NodeType.COMMENT})


class Node:
    """One node of the parsed tree.

    - node_type: which variant this node is
    - content: trimmed text for TEXT and COMMENT nodes, None otherwise
    - tag_name: case-preserved tag name for ELEMENT nodes, None otherwise
    - attributes: attribute map for ELEMENT nodes, None otherwise
    - doctype: resolved doctype identifier for DOCUMENT nodes, None otherwise
    - charset: declared charset for DOCUMENT nodes, None otherwise
    - children: ordered list of child nodes (always empty for leaf variants)
    """

    __slots__ = ("attributes", "charset", "children", "content", "doctype", "node_type", "tag_name")

    def __init__(
        self, node_type, *, content=None, tag_name=None, attributes=None, doctype=None, charset=None, children=None,
    ):
        if node_type in _CONTENT_TYPES:
            if content is None:
                msg = f"{node_type.name} node requires content"
                raise ValueError(msg)
        elif content is not None:
            msg = f"{node_type.name} node does not carry content"
            raise ValueError(msg)

        if node_type is NodeType.ELEMENT:
            if not tag_name:
                msg = "Empty tag_name passed to Node constructor"
                raise ValueError(msg)
        elif tag_name is not None or attributes is not None:
            msg = f"{node_type.name} node does not carry a tag name or attributes"
            raise ValueError(msg)

        if node_type is NodeType.DOCUMENT:
            if not doctype:
                msg = "DOCUMENT node requires a doctype"
                raise ValueError(msg)
            if charset is None:
                charset = DEFAULT_CHARSET
        elif doctype is not None or charset is not None:
            msg = f"{node_type.name} node does not carry a doctype or charset"
            raise ValueError(msg)

        if children and node_type is not NodeType.ROOT and node_type is not NodeType.ELEMENT:
            msg = f"{node_type.name} node cannot have children"
            raise ValueError(msg)

        self.node_type = node_type
        self.content = content
        self.tag_name = tag_name
        if node_type is NodeType.ELEMENT:
            self.attributes = dict(attributes) if attributes else {}
        else:
            self.attributes = None
        self.doctype = doctype
        self.charset = charset
        self.children = []
        for child in children or ():
            self.append_child(child)

    def append_child(self, child):
        if child.node_type is NodeType.ROOT:
            msg = "ROOT node can only appear at the top of a tree"
            raise ValueError(msg)
        if self.node_type is not NodeType.ROOT and self.node_type is not NodeType.ELEMENT:
            msg = f"{self.node_type.name} node cannot have children"
            raise ValueError(msg)
        self.children.append(child)

    def iter(self):
        """Yield this node and all of its descendants in document order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def to_test_format(self):
        from .serialize import to_test_format

        return to_test_format(self)

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        # Iterative so that deeply nested trees compare without hitting the recursion limit
        pending = [(self, other)]
        while pending:
            a, b = pending.pop()
            if (
                a.node_type is not b.node_type
                or a.content != b.content
                or a.tag_name != b.tag_name
                or a.attributes != b.attributes
                or a.doctype != b.doctype
                or a.charset != b.charset
                or len(a.children) != len(b.children)
            ):
                return False
            pending.extend(zip(a.children, b.children))
        return True

    __hash__ = None  # Unhashable since we define __eq__

    def __repr__(self):
        kind = self.node_type
        if kind is NodeType.TEXT:
            return f"Node(#text={self.content[:30]!r})"
        if kind is NodeType.COMMENT:
            return f"Node(#comment={self.content[:30]!r})"
        if kind is NodeType.DOCUMENT:
            return f"Node(!doctype={self.doctype!r}, charset={self.charset!r})"
        if kind is NodeType.ROOT:
            return f"Node(#root, children={len(self.children)})"
        return f"Node(<{self.tag_name}>, attributes={self.attributes!r}, children={len(self.children)})"


def root(children=None):
    return Node(NodeType.ROOT, children=children)


def text(content):
    return Node(NodeType.TEXT, content=content)


def comment(content):
    return Node(NodeType.COMMENT, content=content)


def element(tag_name, attributes=None, children=None):
    return Node(NodeType.ELEMENT, tag_name=tag_name, attributes=attributes, children=children)


def document(doctype="html", charset=DEFAULT_CHARSET):
    return Node(NodeType.DOCUMENT, doctype=doctype, charset=charset)
