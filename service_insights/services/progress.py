from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display with tqdm (TTY only).

Used by the interactive resolution loop to show how many of the issues
found at the start have been resolved. In non-TTY environments (CI, pipes)
no bar is created, to avoid ANSI control sequence spam.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Resolved/total issue progress bar."""

    def __init__(self, total: int, *, description: str = "Resolving issues") -> None:
        self.total = total
        self.description = description
        self.resolved = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total,
                desc=description,
                unit="issue",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def update_remaining(self, remaining: int) -> None:
        """Advance to ``total - remaining`` resolved.

        Edits can surface new issues; the bar grows its total instead of
        moving backwards.
        """
        resolved = max(self.total - remaining, self.resolved)
        if remaining + resolved > self.total:
            self.total = remaining + resolved
            if self.pbar is not None:
                self.pbar.total = self.total
                self.pbar.refresh()
        step = resolved - self.resolved
        self.resolved = resolved
        if self.enabled and self.pbar is not None and step > 0:
            self.pbar.update(step)

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
