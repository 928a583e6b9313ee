"""Node recognizers: one structural unit of the document each.

A node recognizer is called as ``recognizer(source, pos, errors, locator)``
and returns ``(node, new_pos)`` or raises NoMatch. Attribute warnings are
appended to ``errors`` only when the whole unit matched; ``locator`` is the
parse's Locator, used to place them.
"""

import re

from . import node as dom
from .attributes import attribute_list
from .node import DEFAULT_CHARSET, FLAG_VALUE
from .tokenizer import (
    bang_open,
    chevron_close,
    chevron_open,
    comment_delimiter,
    end_tag_open,
    literal,
    self_closing_close,
    word,
)
from .tokens import NoMatch

_COMMENT_TEXT_PATTERN = re.compile(r"[^-]+")
_doctype_keyword = literal("DOCTYPE")


def _report(errors, problems):
    if errors is not None:
        errors.extend(problems)


def resolve_doctype(attributes):
    """Doctype is "html" unless an attribute has an explicit value; then its name is used."""
    doctype = "html"
    for key, value in attributes.items():
        if value != FLAG_VALUE:
            doctype = key
    return doctype


def resolve_charset(attributes):
    """Value of a ``charset=...`` attribute, DEFAULT_CHARSET when there is none."""
    value = attributes.get("charset", FLAG_VALUE)
    return DEFAULT_CHARSET if value == FLAG_VALUE else value


def doctype(source, pos, errors=None, locator=None):
    """<!DOCTYPE attr...>"""
    _, p = bang_open(source, pos)
    _, p = _doctype_keyword(source, p)
    attributes, problems, p = attribute_list(source, p, locator)
    _, p = chevron_close(source, p)
    _report(errors, problems)
    return dom.document(resolve_doctype(attributes), resolve_charset(attributes)), p


def comment(source, pos, errors=None, locator=None):
    """<!-- text --> with 2 to 100 dashes on each side; the text cannot contain dashes."""
    _, p = bang_open(source, pos)
    _, p = comment_delimiter(source, p)
    match = _COMMENT_TEXT_PATTERN.match(source, p)
    if match is None:
        raise NoMatch(p, "comment text")
    _, p = comment_delimiter(source, match.end())
    _, p = chevron_close(source, p)
    return dom.comment(match.group().strip()), p


def _tag_head(source, pos, locator):
    _, p = chevron_open(source, pos)
    tag_name, p = word(source, p)
    attributes, problems, p = attribute_list(source, p, locator)
    return tag_name, attributes, problems, p


def self_closing_element(source, pos, errors=None, locator=None):
    """<tag attr.../>"""
    tag_name, attributes, problems, p = _tag_head(source, pos, locator)
    _, p = self_closing_close(source, p)
    _report(errors, problems)
    return dom.element(tag_name, attributes), p


def start_tag(source, pos, errors=None, locator=None):
    """<tag attr...>: an element whose body has not been read yet."""
    tag_name, attributes, problems, p = _tag_head(source, pos, locator)
    _, p = chevron_close(source, p)
    _report(errors, problems)
    return dom.element(tag_name, attributes), p


def end_tag(source, pos, tag_name):
    """</tag_name> for exactly this tag name."""
    _, p = end_tag_open(source, pos)
    if not source.startswith(tag_name, p):
        raise NoMatch(pos, f"</{tag_name}>")
    _, p = chevron_close(source, p + len(tag_name))
    return tag_name, p


def text(source, pos, errors=None, locator=None):
    """Everything up to the next "<", trimmed.

    A whitespace-only run does not match: it is left to the next delimiter,
    which skips it, or to the end of input, so formatting whitespace between
    tags never yields an empty text node.
    """
    end = source.find("<", pos)
    if end == -1:
        end = len(source)
    content = source[pos:end].strip()
    if not content:
        raise NoMatch(pos, "text")
    return dom.text(content), end


def element(source, pos, errors=None, locator=None):
    """<tag attr...> children </tag>, children read by the tree builder's body loop."""
    from .treebuilder import TreeBuilder

    builder = TreeBuilder(source, on_error=errors.append if errors is not None else None, locator=locator)
    return builder.build_element(pos)


# Alternation order for everything except the open/close element, which the
# tree builder tries last through start_tag.
NODE_RECOGNIZERS = (doctype, comment, self_closing_element, text)
