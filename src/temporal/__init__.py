"""Worker wiring for running the extraction workflow on a task queue.

The worker module is loaded on first attribute access so that importing
``src.temporal`` does not pull in the activity dependencies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

__all__ = ["build_parser", "create_worker", "main", "run_worker"]

if TYPE_CHECKING:
    from .worker import build_parser, create_worker, main, run_worker


def __getattr__(name: str) -> Any:
    if name in __all__:
        from . import worker

        return getattr(worker, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
