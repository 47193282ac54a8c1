from __future__ import annotations

from dataclasses import dataclass, field

"""Upload validation result model."""

__all__ = [
    "FileValidationResult",
]


@dataclass(frozen=True)
class FileValidationResult:
    """Outcome of pre-parse upload checks.

    Errors block parsing; warnings are advisory only.
    """
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors
