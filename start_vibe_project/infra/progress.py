"""Durable, append-only record of pipeline steps.

Each transition rewrites the whole ``ProgressState`` JSON file.  Writes are
chained through a single pending-task tail, so persisted states land on disk
in call order even when callers do not await between calls.  Persistence
failures are reported to the logger and never raised into the pipeline.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path

from ..errors import error_message
from ..models import ProgressState, ProgressStatus
from ..ports import FileSystemPort, LoggerPort


class ProgressTracker:
    """Persists pipeline progress to *progress_path*.

    Every public method returns an awaitable that resolves once that state
    (and every state requested before it) has been written.
    """

    def __init__(self, progress_path: str | Path, fs: FileSystemPort, logger: LoggerPort) -> None:
        self.progress_path = Path(progress_path)
        self.fs = fs
        self.logger = logger
        self.steps: list[str] = []
        self.last_step: str | None = None
        self._tail: asyncio.Future | None = None

    # -- Public API --------------------------------------------------------

    def record_step(self, step: str) -> asyncio.Future:
        self.steps.append(step)
        self.last_step = step
        return self._enqueue(ProgressStatus.IN_PROGRESS)

    def mark_error(self, error: object) -> asyncio.Future:
        return self._enqueue(ProgressStatus.ERROR, error_message(error))

    def mark_cancelled(self) -> asyncio.Future:
        return self._enqueue(ProgressStatus.CANCELLED)

    def mark_completed(self) -> asyncio.Future:
        return self._enqueue(ProgressStatus.COMPLETED)

    async def flush(self) -> None:
        """Wait until every queued write has been applied."""
        if self._tail is not None:
            await self._tail

    def snapshot(self, status: ProgressStatus, error: str | None = None) -> ProgressState:
        return ProgressState(
            status=status,
            steps=list(self.steps),
            last_step=self.last_step,
            updated_at=datetime.now(timezone.utc).isoformat(),
            error=error,
        )

    # -- Internals ---------------------------------------------------------

    def _enqueue(self, status: ProgressStatus, error: str | None = None) -> asyncio.Future:
        state = self.snapshot(status, error)
        previous = self._tail

        async def _write_after_previous() -> None:
            if previous is not None:
                await previous
            await self._persist(state)

        self._tail = asyncio.ensure_future(_write_after_previous())
        return self._tail

    async def _persist(self, state: ProgressState) -> None:
        try:
            dir_result = await self.fs.mkdir(self.progress_path.parent, True)
            if dir_result.is_err():
                self.logger.error(
                    "ProgressTracker: failed to create directory",
                    {"error": error_message(dir_result.error)},
                )
                return

            payload = json.dumps(state.model_dump(mode="json", exclude_none=True), indent=2)
            file_result = await self.fs.write_file(self.progress_path, payload + "\n")
            if file_result.is_err():
                self.logger.error(
                    "ProgressTracker: failed to write state",
                    {"error": error_message(file_result.error)},
                )
        except Exception as exc:  # progress writes never propagate
            self.logger.error("ProgressTracker: unexpected error", {"error": str(exc)})
