"""Core data structures for the i18nify rewriter."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

DEFAULT_CALL_NAME = "i18n"


class TextShape(Enum):
    """The node shapes whose literal text may be rewritten."""

    PLAIN_LITERAL = "plain literal"
    PROPERTY_KEY = "property key"
    INTERPOLATED = "template literal"
    MARKUP_ATTRIBUTE = "JSX attribute"
    MARKUP_TEXT = "JSX text"


@dataclass(frozen=True)
class CallInsertion:
    """A call to the lookup function carrying a generated key."""

    key: str
    callee: str = DEFAULT_CALL_NAME

    def render(self) -> str:
        return f"{self.callee}({json.dumps(self.key)})"


@dataclass(frozen=True)
class TextEdit:
    """Replacement of a byte range of the original source."""

    start_byte: int
    end_byte: int
    replacement: str


@dataclass
class TextNode:
    """A node whose payload is a single literal string."""

    shape: TextShape
    value: str
    start_byte: int
    end_byte: int


@dataclass
class Segment:
    """A fixed-text piece of a template literal."""

    raw: str
    cooked: Optional[str]
    start_byte: int
    end_byte: int

    @property
    def value(self) -> str:
        return self.cooked if self.cooked is not None else self.raw


@dataclass
class InterpolatedText:
    """Template literal text split into segments and embedded expression slots."""

    segments: List[Segment]
    slots: List[str]
    start_byte: int
    end_byte: int
    shape: TextShape = field(default=TextShape.INTERPOLATED, init=False)


@dataclass
class ReplaceNode:
    """Replace a literal wholesale, optionally inside a JSX expression container."""

    node: TextNode
    call: CallInsertion
    container: bool = False

    @property
    def shape(self) -> TextShape:
        return self.node.shape

    def edits(self) -> List[TextEdit]:
        rendered = self.call.render()
        if self.container:
            rendered = "{" + rendered + "}"
        return [TextEdit(self.node.start_byte, self.node.end_byte, rendered)]


@dataclass
class ReplaceKey:
    """Turn a quoted member name into a computed key holding the call."""

    node: TextNode
    call: CallInsertion

    @property
    def shape(self) -> TextShape:
        return self.node.shape

    def edits(self) -> List[TextEdit]:
        return [
            TextEdit(self.node.start_byte, self.node.end_byte, f"[{self.call.render()}]")
        ]


@dataclass
class SpliceSegments:
    """Insert one call slot in place of each matching template segment.

    ``insertions`` holds ``(original_segment_index, call)`` pairs in left to right
    order. Each matching segment is replaced by two empty segments with the new
    slot between them, so the segment count always stays one above the slot count.
    """

    template: InterpolatedText
    insertions: List[Tuple[int, CallInsertion]]

    @property
    def shape(self) -> TextShape:
        return self.template.shape

    @property
    def segments(self) -> List[str]:
        result = [segment.raw for segment in self.template.segments]
        for shift, (index, _) in enumerate(self.insertions):
            position = index + shift
            result[position:position + 1] = ["", ""]
        return result

    @property
    def slots(self) -> List[str]:
        result = list(self.template.slots)
        for shift, (index, call) in enumerate(self.insertions):
            result.insert(index + shift, call.render())
        return result

    def edits(self) -> List[TextEdit]:
        edits: List[TextEdit] = []
        for index, call in self.insertions:
            segment = self.template.segments[index]
            edits.append(
                TextEdit(segment.start_byte, segment.end_byte, "${" + call.render() + "}")
            )
        return edits


Instruction = Union[ReplaceNode, ReplaceKey, SpliceSegments]
