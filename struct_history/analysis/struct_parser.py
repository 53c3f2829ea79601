"""
Structural parsing of struct declarations.

A snippet cut out of a revision is parsed with the tree-sitter Rust
grammar and reduced to a FieldSignature. The canonical text is built
from tokens only, so whitespace, comments and trailing commas never make
two revisions look different.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Tuple

from tree_sitter import Node, Parser
from tree_sitter_language_pack import get_parser

from ..domain import Field, FieldSignature
from ..errors import EntityParseError

LOG = logging.getLogger(__name__)

_COMMENT_TYPES = {"line_comment", "block_comment"}
# Nodes whose text is a single token even though the grammar splits them.
_ATOMIC_TYPES = {
    "lifetime",
    "string_literal",
    "raw_string_literal",
    "char_literal",
    "integer_literal",
    "float_literal",
}

_parser: Optional[Parser] = None


def _get_parser() -> Parser:
    global _parser
    if _parser is None:
        _parser = get_parser("rust")
        LOG.debug("Loaded rust parser")
    return _parser


def parse_struct(snippet: str) -> FieldSignature:
    """
    Parse a struct declaration and return its field signature.

    Raises EntityParseError when the snippet does not contain exactly one
    syntactically valid struct declaration.
    """

    source = snippet.encode("utf-8")
    tree = _get_parser().parse(source)
    root = tree.root_node

    if root.has_error:
        raise EntityParseError("snippet is not a valid struct declaration", snippet)

    items = [child for child in root.named_children if child.type not in _COMMENT_TYPES]
    if len(items) != 1 or items[0].type != "struct_item":
        kinds = ", ".join(item.type for item in items) or "nothing"
        raise EntityParseError(f"expected a single struct declaration, found {kinds}", snippet)

    body = items[0].child_by_field_name("body")
    if body is None:
        return FieldSignature(text=";", fields=(), kind="unit")

    if body.type == "field_declaration_list":
        fields = tuple(_named_fields(body, source))
        parts = [_render_named(f) for f in fields]
        text = "{ " + " , ".join(parts) + " }" if parts else "{ }"
        return FieldSignature(text=text, fields=fields, kind="named")

    if body.type == "ordered_field_declaration_list":
        fields = tuple(_ordered_fields(body, source))
        parts = [_render_ordered(f) for f in fields]
        text = "( " + " , ".join(parts) + " )" if parts else "( )"
        return FieldSignature(text=text, fields=fields, kind="tuple")

    raise EntityParseError(f"unsupported struct body {body.type}", snippet)


def _text(node: Node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8")


def _tokens(node: Node, source: bytes) -> Iterator[str]:
    if node.type in _COMMENT_TYPES:
        return
    if node.child_count == 0 or node.type in _ATOMIC_TYPES:
        yield _text(node, source)
        return
    for child in node.children:
        yield from _tokens(child, source)


def _token_text(node: Node, source: bytes) -> str:
    return " ".join(_tokens(node, source))


def _named_fields(body: Node, source: bytes) -> Iterator[Field]:
    attributes: List[str] = []
    for child in body.named_children:
        if child.type == "attribute_item":
            attributes.append(_token_text(child, source))
        elif child.type == "field_declaration":
            name = child.child_by_field_name("name")
            ty = child.child_by_field_name("type")
            visibility = _visibility(child, source)
            yield Field(
                name=_text(name, source) if name is not None else None,
                ty=_token_text(ty, source) if ty is not None else "",
                visibility=visibility,
                attributes=tuple(attributes),
            )
            attributes = []


def _ordered_fields(body: Node, source: bytes) -> Iterator[Field]:
    # Tuple fields are flat: attributes and visibility precede each type.
    attributes: List[str] = []
    visibility = ""
    for child in body.named_children:
        if child.type in _COMMENT_TYPES:
            continue
        if child.type == "attribute_item":
            attributes.append(_token_text(child, source))
        elif child.type == "visibility_modifier":
            visibility = _token_text(child, source)
        else:
            yield Field(
                name=None,
                ty=_token_text(child, source),
                visibility=visibility,
                attributes=tuple(attributes),
            )
            attributes = []
            visibility = ""


def _visibility(field_node: Node, source: bytes) -> str:
    for child in field_node.children:
        if child.type == "visibility_modifier":
            return _token_text(child, source)
    return ""


def _prefix(field: Field) -> Tuple[str, ...]:
    parts = tuple(field.attributes)
    if field.visibility:
        parts += (field.visibility,)
    return parts


def _render_named(field: Field) -> str:
    return " ".join(_prefix(field) + (f"{field.name}", ":", field.ty))


def _render_ordered(field: Field) -> str:
    return " ".join(_prefix(field) + (field.ty,))


def _struct_items(node: Node) -> Iterator[Node]:
    for child in node.named_children:
        if child.type == "struct_item":
            yield child
        elif child.type not in _COMMENT_TYPES:
            yield from _struct_items(child)


def find_struct(content: bytes, name: str) -> Optional[Tuple[int, int]]:
    """
    Return the byte range of the first declaration of struct `name`.

    The whole file is parsed, so mentions in comments, strings and macro
    bodies are never mistaken for the declaration. The range covers the
    visibility modifier through the closing brace or semicolon.
    """

    tree = _get_parser().parse(content)
    for item in _struct_items(tree.root_node):
        ident = item.child_by_field_name("name")
        if ident is not None and content[ident.start_byte : ident.end_byte] == name.encode("utf-8"):
            return item.start_byte, item.end_byte
    return None
