from __future__ import annotations

import sys
from collections.abc import Callable
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.processing_result import ProgressUpdate

"""Progress reporting for the per-subject batch loop.

Two channels:
- ProgressTracker: tqdm bar on a TTY only (no ANSI spam in CI / logs)
- ProgressCallback: caller-supplied function receiving a ProgressUpdate after
  each unit of work (used by UIs to show step / completed / total / percent)
"""

__all__ = [
    "ProgressCallback",
    "ProgressTracker",
    "is_tty_enabled",
    "make_update",
]

ProgressCallback = Callable[[ProgressUpdate], None]


def is_tty_enabled() -> bool:
    """Check if stdout is a TTY (progress bar is shown only then)."""
    return sys.stdout.isatty()


def make_update(step: str, completed: int, total: int, percent: float | None = None) -> ProgressUpdate:
    """Build a ProgressUpdate; percent defaults to completed / total."""
    if percent is None:
        percent = (completed / total * 100) if total else 100.0
    return ProgressUpdate(step=step, completed=completed, total=total, percent=percent)


class ProgressTracker:
    """tqdm progress bar over subjects, disabled outside a TTY."""

    def __init__(self, total_subjects: int, *, description: str = "Generating sheets") -> None:
        self.total_subjects = total_subjects
        self.description = description
        self.current_subject = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_subjects,
                desc=description,
                unit="subject",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def start_subject(self, subject_code: str) -> None:
        self.current_subject += 1
        if self.enabled and self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({subject_code})")

    def finish_subject(self, success: bool = True) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.description)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
