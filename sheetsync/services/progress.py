from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display service with tqdm (TTY only).

One bar per patch application, advanced once per cell write. Disabled when
stdout is not a TTY so CI logs stay free of control sequences.
"""

__all__ = [
    "WriteProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """Return True if stdout is a TTY and progress should be displayed."""
    return sys.stdout.isatty()


class WriteProgress:
    """Progress bar over cell writes.

    Args:
        total_writes: number of cell writes planned
        description: label shown in front of the bar
        enabled: force on/off; None = follow TTY detection
    """

    def __init__(
        self,
        total_writes: int,
        *,
        description: str = "Writing cells",
        enabled: bool | None = None,
    ) -> None:
        self.total_writes = total_writes
        self.description = description
        self.written = 0

        self.enabled = is_tty_enabled() if enabled is None else enabled
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_writes,
                desc=description,
                unit="cell",
                disable=False,
                leave=False,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def start_row(self, row_position: int, kind: str) -> None:
        """Show which row is being written (``kind`` = append / update)."""
        if self.enabled and self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({kind} row {row_position})")

    def advance(self, count: int = 1) -> None:
        self.written += count
        if self.enabled and self.pbar is not None:
            self.pbar.update(count)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> WriteProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
