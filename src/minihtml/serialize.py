"""Presentation helpers for minihtml trees.

- to_tree: indented dump with box-drawing branches, for debugging output
- to_test_format: html5lib-style "| " format used by the tests
- to_html: canonical markup that parses back to an equal tree; trees that
  have no such markup raise ValueError
"""

from .node import DEFAULT_CHARSET, FLAG_VALUE, NodeType


def format_attribute(name, value):
    """Canonical quoted form of one attribute: name="value" (single quotes if the value has a ")."""
    if '"' not in value:
        return f'{name}="{value}"'
    if "'" not in value:
        return f"{name}='{value}'"
    msg = f"Attribute {name!r} value contains both quote characters and cannot be serialized"
    raise ValueError(msg)


def format_attributes(attributes):
    if not attributes:
        return ""
    return " " + " ".join(format_attribute(name, value) for name, value in attributes.items())


def to_html(node, indent=0, indent_size=2):
    """Convert node to pretty-printed HTML string."""
    if node.node_type is NodeType.ROOT:
        _check_text_runs(node)
        return "\n".join(_node_to_html(child, indent, indent_size) for child in node.children)
    return _node_to_html(node, indent, indent_size)


def _node_to_html(node, indent, indent_size):
    prefix = " " * (indent * indent_size)
    kind = node.node_type

    if kind is NodeType.TEXT:
        return f"{prefix}{node.content}"
    if kind is NodeType.COMMENT:
        return f"{prefix}<!-- {node.content} -->"
    if kind is NodeType.DOCUMENT:
        return f"{prefix}<!DOCTYPE{_doctype_attributes(node)}>"
    if kind is NodeType.ROOT:
        msg = "ROOT node can only appear at the top of a tree"
        raise ValueError(msg)

    name = node.tag_name
    attr_str = format_attributes(node.attributes)
    children = node.children
    if not children:
        return f"{prefix}<{name}{attr_str}/>"

    if len(children) == 1 and children[0].node_type is NodeType.TEXT:
        return f"{prefix}<{name}{attr_str}>{children[0].content}</{name}>"

    _check_text_runs(node)

    parts = [f"{prefix}<{name}{attr_str}>"]
    parts.extend(_node_to_html(child, indent + 1, indent_size) for child in children)
    parts.append(f"{prefix}</{name}>")
    return "\n".join(parts)


def _check_text_runs(node):
    # Only whitespace separates siblings in the output, and the parser reads a
    # run of text between two tags as one node.
    previous = None
    for child in node.children:
        if previous is NodeType.TEXT and child.node_type is NodeType.TEXT:
            msg = f"Adjacent text nodes {child.content!r} cannot be serialized"
            raise ValueError(msg)
        previous = child.node_type


def _doctype_attributes(node):
    doctype = node.doctype
    charset = node.charset
    if charset == FLAG_VALUE:
        msg = f"Charset {charset!r} reads back as a flag and cannot be serialized"
        raise ValueError(msg)
    if doctype == "charset":
        return " " + format_attribute("charset", charset)
    attributes = []
    if charset != DEFAULT_CHARSET:
        attributes.append(format_attribute("charset", charset))
    elif doctype == "html":
        return " html"
    # Last valued attribute names the doctype; its value only has to differ from FLAG_VALUE.
    attributes.append(format_attribute(doctype, "" if doctype == FLAG_VALUE else doctype))
    return " " + " ".join(attributes)


def to_test_format(node, indent=0):
    """Convert a node to the "| "-prefixed test format."""
    kind = node.node_type
    if kind is NodeType.ROOT:
        return "\n".join(to_test_format(child, 0) for child in node.children)
    if kind is NodeType.TEXT:
        return f'| {" " * indent}"{node.content}"'
    if kind is NodeType.COMMENT:
        return f"| {' ' * indent}<!-- {node.content} -->"
    if kind is NodeType.DOCUMENT:
        return f"| {' ' * indent}<!DOCTYPE {node.doctype}>"

    parts = [f"| {' ' * indent}<{node.tag_name}>"]
    # Sorted so that output does not depend on attribute order in the source.
    parts.extend(f'| {" " * (indent + 2)}{key}="{value}"' for key, value in sorted(node.attributes.items()))
    parts.extend(to_test_format(child, indent + 2) for child in node.children)
    return "\n".join(parts)


def _label(node):
    kind = node.node_type
    if kind is NodeType.ROOT:
        return "Root"
    if kind is NodeType.TEXT:
        return f"Text {node.content}"
    if kind is NodeType.COMMENT:
        return f"Comment {node.content}"
    if kind is NodeType.DOCUMENT:
        return f"Document doctype - {node.doctype}, charset - {node.charset}"
    attrs = " , ".join(f"{key}_{value}" for key, value in node.attributes.items())
    return f"Element tag_name - {node.tag_name}, attributes - {attrs}"


def to_tree(node):
    """Indented dump of the tree, one node per line."""
    lines = [_label(node)]
    _tree_lines(node, "", lines)
    return "\n".join(lines)


def _tree_lines(node, prefix, lines):
    last = len(node.children) - 1
    for index, child in enumerate(node.children):
        branch = "└─ " if index == last else "├─ "
        lines.append(f"{prefix}{branch}{_label(child)}")
        _tree_lines(child, prefix + ("   " if index == last else "│  "), lines)
