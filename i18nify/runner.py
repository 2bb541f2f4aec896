"""High-level orchestration for rewriting one source file."""

from __future__ import annotations

import json
import pathlib
import re
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import I18nifyError, OverwriteRefusedError
from .rewriter import HAN_CHARACTERS, Rewriter
from .structures import DEFAULT_CALL_NAME, Instruction, SpliceSegments, TextShape
from .syntax import generate, parse


@dataclass
class RewriteSummary:
    """Report returned after processing a file."""

    input_path: pathlib.Path
    output_path: pathlib.Path
    written: bool
    replacements: Dict[TextShape, int]
    elapsed_seconds: float
    notes: List[str] = field(default_factory=list)

    @property
    def total_replacements(self) -> int:
        return sum(self.replacements.values())


def count_calls(instructions: List[Instruction]) -> Dict[TextShape, int]:
    """Count inserted calls per text shape."""

    counts: Dict[TextShape, int] = {shape: 0 for shape in TextShape}
    for instruction in instructions:
        if isinstance(instruction, SpliceSegments):
            counts[instruction.shape] += len(instruction.insertions)
        else:
            counts[instruction.shape] += 1
    return counts


def transform_source(
    code: str,
    *,
    call_name: str = DEFAULT_CALL_NAME,
    pattern: re.Pattern[str] = HAN_CHARACTERS,
) -> Optional[str]:
    """Return ``code`` with Chinese literals replaced, or ``None`` if it does not parse."""

    tree = Rewriter(call_name=call_name, pattern=pattern).transform(parse(code))
    if tree is None:
        return None
    return generate(tree)


class RewriteRunner:
    """Coordinates reading, rewriting, and writing a single file."""

    def __init__(
        self,
        *,
        input_path: pathlib.Path,
        output_path: pathlib.Path,
        call_name: str = DEFAULT_CALL_NAME,
        pattern: re.Pattern[str] = HAN_CHARACTERS,
        verbose: bool = False,
        debug: bool = False,
    ) -> None:
        self.input_path = input_path
        self.output_path = output_path
        self.call_name = call_name
        self.pattern = pattern
        self.verbose = verbose
        self.debug = debug

    def run(self) -> RewriteSummary:
        start_time = time.time()

        code = self.input_path.read_text(encoding="utf-8")
        tree = parse(code)
        if tree is None:
            return RewriteSummary(
                input_path=self.input_path,
                output_path=self.output_path,
                written=False,
                replacements=count_calls([]),
                elapsed_seconds=time.time() - start_time,
                notes=[
                    f"Could not parse {self.input_path.name}; no output was written."
                ],
            )
        if self.verbose:
            print(f"Parsed {self.input_path} ({len(tree.source)} bytes).")

        rewriter = Rewriter(call_name=self.call_name, pattern=self.pattern)
        rewriter.transform(tree)
        self._log_debug("rewrite.instructions", self._describe(tree.instructions))

        result = generate(tree)
        self.output_path.write_text(result, encoding="utf-8")
        if self.verbose:
            print(f"Wrote {self.output_path}.")

        return RewriteSummary(
            input_path=self.input_path,
            output_path=self.output_path,
            written=True,
            replacements=count_calls(tree.instructions),
            elapsed_seconds=time.time() - start_time,
        )

    def _describe(self, instructions: List[Instruction]) -> List[Dict[str, Any]]:
        described: List[Dict[str, Any]] = []
        for instruction in instructions:
            described.append(
                {
                    "type": type(instruction).__name__,
                    "shape": instruction.shape.value,
                    "edits": [
                        {
                            "start_byte": edit.start_byte,
                            "end_byte": edit.end_byte,
                            "replacement": edit.replacement,
                        }
                        for edit in instruction.edits()
                    ],
                }
            )
        return described

    def _log_debug(self, label: str, payload: Any) -> None:
        """Emit structured debug information when enabled."""

        if not self.debug:
            return
        try:
            if isinstance(payload, (dict, list)):
                message = json.dumps(payload, ensure_ascii=False, indent=2)
            else:
                message = str(payload)
        except (TypeError, ValueError):
            message = repr(payload)
        print(f"[i18nify][debug] {label}:\n{message}", file=sys.stderr)


def validate_paths(input_path: pathlib.Path, output_path: pathlib.Path) -> None:
    """Validate the input/output path combination."""

    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")
    if not input_path.is_file():
        raise I18nifyError("Input path must be a file.")

    if input_path.resolve() == output_path.resolve():
        raise OverwriteRefusedError(
            "The output path matches the input file. Refusing to overwrite the source file."
        )
