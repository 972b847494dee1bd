# ABOUTME: Minimal structured XML/XHTML document builder.
# ABOUTME: Elements hold a tag, attributes, and children; all escaping happens in escape().

import html
from dataclasses import dataclass, field
from typing import Union

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

_INDENT = "  "


def escape(value: str, *, quote: bool = True) -> str:
    """Escape text or an attribute value for XML.

    The single place where reserved characters are replaced. With `quote`
    set, double and single quotes are escaped too.
    """
    return html.escape(value, quote=quote)


@dataclass
class Raw:
    """Trusted, already-serialized markup embedded verbatim."""

    markup: str


Node = Union["Element", Raw, str]


@dataclass
class Element:
    """An XML element. Attributes whose value is None are omitted."""

    tag: str
    attrs: dict[str, str | None] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)

    def append(self, *nodes: Node) -> "Element":
        """Append children and return self."""
        self.children.extend(nodes)
        return self

    def sub(self, tag: str, attrs: dict[str, str | None] | None = None, text: str | None = None) -> "Element":
        """Create a child element and return it."""
        child = Element(tag, dict(attrs or {}))
        if text is not None:
            child.children.append(text)
        self.children.append(child)
        return child


def _start_tag(element: Element) -> str:
    parts = [element.tag]
    for name, value in element.attrs.items():
        if value is None:
            continue
        parts.append(f'{name}="{escape(value)}"')
    return " ".join(parts)


def _render(node: Node, depth: int, out: list[str]) -> None:
    pad = _INDENT * depth
    if isinstance(node, Raw):
        out.append(node.markup)
        return
    if isinstance(node, str):
        out.append(pad + escape(node, quote=False))
        return

    start = _start_tag(node)
    if not node.children:
        out.append(f"{pad}<{start} />")
    elif all(isinstance(child, str) for child in node.children):
        text = "".join(escape(child, quote=False) for child in node.children)
        out.append(f"{pad}<{start}>{text}</{node.tag}>")
    else:
        out.append(f"{pad}<{start}>")
        for child in node.children:
            _render(child, depth + 1, out)
        out.append(f"{pad}</{node.tag}>")


def serialize(root: Element, *, doctype: str | None = None) -> str:
    """Serialize a document with an XML declaration and optional doctype.

    Elements holding only text stay on one line; others put each child on
    its own indented line. Raw markup is written without indentation.
    """
    out = [XML_DECLARATION]
    if doctype:
        out.append(doctype)
    _render(root, 0, out)
    return "\n".join(out) + "\n"
