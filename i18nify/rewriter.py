"""Detection of Chinese literal text and the rewrite rule for each node shape."""

from __future__ import annotations

import html
import re
from typing import Callable, List, Optional, Tuple

from tree_sitter import Node

from .keys import generate_key
from .structures import (
    DEFAULT_CALL_NAME,
    CallInsertion,
    Instruction,
    ReplaceKey,
    ReplaceNode,
    SpliceSegments,
    TextNode,
    TextShape,
)
from .syntax import (
    SyntaxTree,
    is_directive,
    is_markup_text,
    markup_text_run,
    read_string,
    read_template,
    walk,
)

DEFAULT_TARGET_PATTERN = "[\\u4e00-\\u9fa5]"
HAN_CHARACTERS = re.compile(DEFAULT_TARGET_PATTERN)

# Parent node type -> field holding a member name that may be written as a string.
PROPERTY_NAME_FIELDS = {
    "pair": "key",
    "pair_pattern": "key",
    "method_definition": "name",
    "field_definition": "property",
}
# Strings naming a module cannot become calls.
MODULE_SOURCE_PARENTS = {
    "import_statement",
    "export_statement",
    "import_specifier",
    "export_specifier",
    "namespace_export",
}

KeyGenerator = Callable[[str], str]


def contains_target_script(text: str, pattern: re.Pattern[str] = HAN_CHARACTERS) -> bool:
    """Return True when any character of ``text`` belongs to the target script."""

    return pattern.search(text) is not None


def classify(node: Node) -> Optional[TextShape]:
    """Map a syntax node to the text shape it represents, if any.

    A run of JSX text interrupted by entity references is one MarkupText, reported
    on its first node only.
    """

    if node.type == "template_string":
        return TextShape.INTERPOLATED
    if is_markup_text(node):
        if is_markup_text(node.prev_sibling):
            return None
        return TextShape.MARKUP_TEXT
    if node.type != "string":
        return None

    parent = node.parent
    if parent is None:
        return TextShape.PLAIN_LITERAL
    if parent.type == "jsx_attribute":
        return TextShape.MARKUP_ATTRIBUTE
    if parent.type in MODULE_SOURCE_PARENTS or is_directive(node):
        return None
    field_name = PROPERTY_NAME_FIELDS.get(parent.type)
    if field_name is not None and parent.child_by_field_name(field_name) == node:
        return TextShape.PROPERTY_KEY
    return TextShape.PLAIN_LITERAL


class Rewriter:
    """Records an ``i18n(...)`` insertion for every literal holding Chinese text."""

    def __init__(
        self,
        *,
        call_name: str = DEFAULT_CALL_NAME,
        pattern: re.Pattern[str] = HAN_CHARACTERS,
        key_generator: KeyGenerator = generate_key,
    ) -> None:
        self.call_name = call_name
        self.pattern = pattern
        self.key_generator = key_generator

    def transform(self, tree: Optional[SyntaxTree]) -> Optional[SyntaxTree]:
        """Visit every node once and record the resulting instructions on ``tree``."""

        if tree is None:
            return None
        for node in walk(tree):
            instruction = self.visit(tree, node)
            if instruction is not None:
                tree.record(instruction)
        return tree

    def visit(self, tree: SyntaxTree, node: Node) -> Optional[Instruction]:
        shape = classify(node)
        if shape is None:
            return None
        if shape is TextShape.PLAIN_LITERAL:
            return self._rewrite_literal(tree, node)
        if shape is TextShape.PROPERTY_KEY:
            return self._rewrite_property_key(tree, node)
        if shape is TextShape.INTERPOLATED:
            return self._rewrite_template(tree, node)
        if shape is TextShape.MARKUP_ATTRIBUTE:
            return self._rewrite_attribute(tree, node)
        return self._rewrite_markup_text(tree, node)

    # --- Rules ------------------------------------------------------------

    def _rewrite_literal(self, tree: SyntaxTree, node: Node) -> Optional[Instruction]:
        value = read_string(tree, node)
        if not self._matches(value):
            return None
        text_node = TextNode(TextShape.PLAIN_LITERAL, value, node.start_byte, node.end_byte)
        return ReplaceNode(node=text_node, call=self._call(value))

    def _rewrite_property_key(self, tree: SyntaxTree, node: Node) -> Optional[Instruction]:
        value = read_string(tree, node)
        if not self._matches(value):
            return None
        text_node = TextNode(TextShape.PROPERTY_KEY, value, node.start_byte, node.end_byte)
        return ReplaceKey(node=text_node, call=self._call(value))

    def _rewrite_template(self, tree: SyntaxTree, node: Node) -> Optional[Instruction]:
        template = read_template(tree, node)
        insertions: List[Tuple[int, CallInsertion]] = [
            (index, self._call(segment.value))
            for index, segment in enumerate(template.segments)
            if self._matches(segment.value)
        ]
        if not insertions:
            return None
        return SpliceSegments(template=template, insertions=insertions)

    def _rewrite_attribute(self, tree: SyntaxTree, node: Node) -> Optional[Instruction]:
        value = read_string(tree, node, markup=True)
        if not self._matches(value):
            return None
        text_node = TextNode(TextShape.MARKUP_ATTRIBUTE, value, node.start_byte, node.end_byte)
        return ReplaceNode(node=text_node, call=self._call(value), container=True)

    def _rewrite_markup_text(self, tree: SyntaxTree, node: Node) -> Optional[Instruction]:
        run = markup_text_run(node)
        start_byte, end_byte = run[0].start_byte, run[-1].end_byte
        raw = tree.slice(start_byte, end_byte)
        if not self._matches(html.unescape(raw)):
            return None
        # Surrounding whitespace stays in place outside the container.
        leading = len(raw[: len(raw) - len(raw.lstrip())].encode("utf-8"))
        trailing = len(raw[len(raw.rstrip()):].encode("utf-8"))
        value = html.unescape(raw.strip())
        text_node = TextNode(
            TextShape.MARKUP_TEXT,
            value,
            start_byte + leading,
            end_byte - trailing,
        )
        return ReplaceNode(node=text_node, call=self._call(value), container=True)

    # --- Internal helpers -------------------------------------------------

    def _matches(self, text: str) -> bool:
        return contains_target_script(text, self.pattern)

    def _call(self, text: str) -> CallInsertion:
        return CallInsertion(key=self.key_generator(text), callee=self.call_name)


def transform(tree: Optional[SyntaxTree], **options) -> Optional[SyntaxTree]:
    """Run a default-configured rewrite pass over ``tree``."""

    return Rewriter(**options).transform(tree)
