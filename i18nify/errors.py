"""Error definitions for the i18nify rewriter."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class ErrorCategory(Enum):
    """Categorises failures reported at the command line boundary."""

    ARGUMENT = auto()
    FILE_IO = auto()
    PARSE = auto()
    CONFIGURATION = auto()
    DEFECT = auto()
    OTHER = auto()


class I18nifyError(Exception):
    """Base exception for all custom errors."""


class ConfigurationError(I18nifyError):
    """Raised when settings are missing or invalid."""


class OverwriteRefusedError(I18nifyError):
    """Raised when the output path would overwrite the input source."""


class RewriteDefect(I18nifyError):
    """Raised when a tree invariant assumed by the rewrite rules does not hold."""


@dataclass
class ErrorRecord:
    """Stores context for a failure surfaced to the user."""

    category: ErrorCategory
    message: str
    details: Optional[str] = None

    def describe(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message
