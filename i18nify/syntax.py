"""Tree-sitter backed parsing, traversal, and source generation."""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

import tree_sitter_javascript
from tree_sitter import Language, Node, Parser, Tree

from .errors import RewriteDefect
from .structures import Instruction, InterpolatedText, Segment, TextEdit

JS_LANGUAGE = Language(tree_sitter_javascript.language())

SINGLE_CHARACTER_ESCAPES = {
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
}
LINE_TERMINATORS = "\n\r\u2028\u2029"
HEX_DIGITS = "0123456789abcdefABCDEF"

# Sibling nodes that together form one run of JSX child text.
MARKUP_TEXT_TYPES = {"jsx_text", "html_character_reference"}
FUNCTION_TYPES = {
    "arrow_function",
    "function",
    "function_declaration",
    "function_expression",
    "generator_function",
    "generator_function_declaration",
    "method_definition",
}


@dataclass
class SyntaxTree:
    """A parsed module together with the rewrite instructions recorded against it."""

    source: bytes
    tree: Tree
    instructions: List[Instruction] = field(default_factory=list)

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Node) -> str:
        return self.slice(node.start_byte, node.end_byte)

    def slice(self, start_byte: int, end_byte: int) -> str:
        return self.source[start_byte:end_byte].decode("utf-8")

    def record(self, instruction: Instruction) -> None:
        self.instructions.append(instruction)

    def edits(self) -> List[TextEdit]:
        collected: List[TextEdit] = []
        for instruction in self.instructions:
            collected.extend(instruction.edits())
        return sorted(collected, key=lambda edit: edit.start_byte)


def parse(source_text: str) -> Optional[SyntaxTree]:
    """Parse module source (JSX enabled); return ``None`` when it is not valid syntax."""

    source = source_text.encode("utf-8")
    parser = Parser(JS_LANGUAGE)
    tree = parser.parse(source)
    if tree.root_node.has_error:
        return None
    return SyntaxTree(source=source, tree=tree)


def walk(tree: SyntaxTree) -> Iterator[Node]:
    """Yield every node of the tree in pre-order."""

    cursor = tree.root.walk()
    visited_children = False
    while True:
        if not visited_children:
            yield cursor.node
            if not cursor.goto_first_child():
                visited_children = True
        elif cursor.goto_next_sibling():
            visited_children = False
        elif not cursor.goto_parent():
            break


def generate(tree: SyntaxTree) -> str:
    """Render the source with every recorded edit applied."""

    chunks: List[bytes] = []
    cursor = 0
    for edit in tree.edits():
        if edit.start_byte < cursor:
            raise RewriteDefect(
                f"Overlapping edits at byte {edit.start_byte}; refusing to render."
            )
        chunks.append(tree.source[cursor:edit.start_byte])
        chunks.append(edit.replacement.encode("utf-8"))
        cursor = edit.end_byte
    chunks.append(tree.source[cursor:])
    return b"".join(chunks).decode("utf-8")


def decode_escapes(raw: str) -> Optional[str]:
    """Decode JavaScript escape sequences; ``None`` when an escape is invalid."""

    decoded: List[str] = []
    index = 0
    length = len(raw)
    while index < length:
        char = raw[index]
        if char != "\\":
            decoded.append(char)
            index += 1
            continue
        index += 1
        if index >= length:
            return None
        char = raw[index]
        index += 1
        if char in SINGLE_CHARACTER_ESCAPES:
            decoded.append(SINGLE_CHARACTER_ESCAPES[char])
        elif char == "0":
            if index < length and raw[index].isdigit():
                return None
            decoded.append("\0")
        elif char in "123456789":
            return None
        elif char == "x":
            digits = raw[index:index + 2]
            if len(digits) != 2 or any(d not in HEX_DIGITS for d in digits):
                return None
            decoded.append(chr(int(digits, 16)))
            index += 2
        elif char == "u":
            if raw[index:index + 1] == "{":
                closing = raw.find("}", index)
                digits = raw[index + 1:closing] if closing != -1 else ""
                if not digits or any(d not in HEX_DIGITS for d in digits):
                    return None
                code_point = int(digits, 16)
                if code_point > 0x10FFFF:
                    return None
                decoded.append(chr(code_point))
                index = closing + 1
            else:
                digits = raw[index:index + 4]
                if len(digits) != 4 or any(d not in HEX_DIGITS for d in digits):
                    return None
                decoded.append(chr(int(digits, 16)))
                index += 4
        elif char in LINE_TERMINATORS:
            # Line continuation.
            if char == "\r" and raw[index:index + 1] == "\n":
                index += 1
        else:
            decoded.append(char)
    return "".join(decoded)


def read_string(tree: SyntaxTree, node: Node, *, markup: bool = False) -> str:
    """Return the value of a quoted string node.

    JSX attribute strings take no backslash escapes but may hold HTML entities.
    """

    content = tree.slice(node.start_byte + 1, node.end_byte - 1)
    if markup:
        return html.unescape(content)
    decoded = decode_escapes(content)
    return decoded if decoded is not None else content


def read_template(tree: SyntaxTree, node: Node) -> InterpolatedText:
    """Split a template string into its fixed segments and expression slots."""

    segments: List[Segment] = []
    slots: List[str] = []
    cursor = node.start_byte + 1
    for child in node.children:
        if child.type != "template_substitution":
            continue
        segments.append(_segment(tree, cursor, child.start_byte))
        # Strip the "${" and "}" delimiters.
        slots.append(tree.slice(child.start_byte + 2, child.end_byte - 1))
        cursor = child.end_byte
    segments.append(_segment(tree, cursor, node.end_byte - 1))

    if len(segments) != len(slots) + 1:
        raise RewriteDefect(
            f"Template at byte {node.start_byte} has {len(segments)} segments "
            f"for {len(slots)} slots."
        )
    return InterpolatedText(
        segments=segments,
        slots=slots,
        start_byte=node.start_byte,
        end_byte=node.end_byte,
    )


def _segment(tree: SyntaxTree, start_byte: int, end_byte: int) -> Segment:
    raw = tree.slice(start_byte, end_byte).replace("\r\n", "\n").replace("\r", "\n")
    return Segment(
        raw=raw,
        cooked=decode_escapes(raw),
        start_byte=start_byte,
        end_byte=end_byte,
    )


def is_markup_text(node: Optional[Node]) -> bool:
    """True for JSX child text, including entity references between text pieces."""

    if node is None or node.type not in MARKUP_TEXT_TYPES:
        return False
    return node.parent is not None and node.parent.type != "string"


def markup_text_run(node: Node) -> List[Node]:
    """Return the maximal run of adjacent JSX text siblings starting at ``node``."""

    run = [node]
    sibling = node.next_sibling
    while is_markup_text(sibling):
        run.append(sibling)
        sibling = sibling.next_sibling
    return run


def is_directive(node: Node) -> bool:
    """True when ``node`` is a string forming a directive such as ``"use strict"``.

    Directives are the leading string-only statements of a module or function body.
    """

    statement = node.parent
    if statement is None or statement.type != "expression_statement":
        return False
    body = statement.parent
    if body is None:
        return False
    if body.type == "statement_block":
        if body.parent is None or body.parent.type not in FUNCTION_TYPES:
            return False
    elif body.type != "program":
        return False

    for child in body.named_children:
        if child.type in ("comment", "hash_bang_line"):
            continue
        if child == statement:
            return True
        if not _is_string_statement(child):
            return False
    return False


def _is_string_statement(node: Node) -> bool:
    if node.type != "expression_statement" or node.named_child_count != 1:
        return False
    return node.named_children[0].type == "string"
