"""External process execution without a shell interpreter.

Spawns npm, git and the skills CLI with ``asyncio.create_subprocess_exec``
(command and arguments as a discrete argument vector), accumulates output
incrementally, and turns timeouts, cancellation, spawn failures and non-zero
exits into ``CommandExecutionError`` values.
"""

from __future__ import annotations

import asyncio
import os
import signal
from dataclasses import dataclass
from pathlib import Path

from ..errors import CommandExecutionError
from ..result import Err, Ok, Result
from ..utils import format_command

DEFAULT_TIMEOUT = 300.0
KILL_GRACE_SECONDS = 5.0


@dataclass(frozen=True)
class CommandOutput:
    """Captured output of a successful command."""

    stdout: str
    stderr: str


class ShellRunner:
    """Runs external commands and reports failures as ``Result`` values.

    Each command leads its own process group.  A timeout or cancellation
    sends SIGTERM to the whole group, then SIGKILL once *kill_grace* runs
    out, so helpers the command started do not outlive it.

    Args:
        default_timeout: Seconds before a command without an explicit
            ``timeout`` is killed.
        kill_grace: Seconds between SIGTERM and SIGKILL.
    """

    def __init__(
        self, default_timeout: float = DEFAULT_TIMEOUT, kill_grace: float = KILL_GRACE_SECONDS
    ) -> None:
        self.default_timeout = default_timeout
        self.kill_grace = kill_grace

    async def run(
        self,
        command: str,
        args: list[str],
        cwd: str | Path,
        *,
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[CommandOutput, CommandExecutionError]:
        """Run ``command args...`` inside *cwd*.

        *cwd* must be absolute and must exist; anything else is rejected
        before a process is spawned.  *timeout* is in seconds.  Setting
        *cancel_event* terminates the process the same way a timeout does.
        """
        rendered = format_command(command, args)
        limit = self.default_timeout if timeout is None else timeout

        workdir = _validate_cwd(cwd)
        if workdir is None:
            return Err(
                CommandExecutionError(
                    "Invalid working directory", rendered, context={"cwd": str(cwd)}
                )
            )

        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                cwd=str(workdir),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as exc:
            return Err(
                CommandExecutionError(
                    f"Failed to start command: {exc.strerror or exc}", rendered
                )
            )

        stdout_chunks: list[bytes] = []
        stderr_chunks: list[bytes] = []
        readers = asyncio.gather(
            _drain(process.stdout, stdout_chunks),
            _drain(process.stderr, stderr_chunks),
            process.wait(),
        )

        waiters: set[asyncio.Future] = {readers}
        cancel_task: asyncio.Task | None = None
        if cancel_event is not None:
            cancel_task = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_task)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=limit, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            await _terminate(process, readers, self.kill_grace)
            raise
        finally:
            if cancel_task is not None and not cancel_task.done():
                cancel_task.cancel()

        if readers not in done:
            await _terminate(process, readers, self.kill_grace)
            stderr = _decode(stderr_chunks)
            if cancel_task is not None and cancel_task in done:
                return Err(
                    CommandExecutionError("Command was cancelled", rendered, -1, stderr)
                )
            return Err(
                CommandExecutionError(
                    f"Command timed out after {limit:g}s", rendered, -1, stderr
                )
            )

        stdout = _decode(stdout_chunks)
        stderr = _decode(stderr_chunks)
        if process.returncode != 0:
            return Err(
                CommandExecutionError(
                    f"Command failed with exit code {process.returncode}",
                    rendered,
                    process.returncode,
                    stderr,
                    {"stdout": stdout},
                )
            )
        return Ok(CommandOutput(stdout=stdout, stderr=stderr))


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _validate_cwd(cwd: str | Path) -> Path | None:
    candidate = Path(cwd)
    if not candidate.is_absolute():
        return None
    resolved = candidate.resolve()
    if not resolved.is_dir():
        return None
    return resolved


async def _drain(stream: asyncio.StreamReader | None, sink: list[bytes]) -> None:
    if stream is None:
        return
    while True:
        chunk = await stream.read(4096)
        if not chunk:
            break
        sink.append(chunk)


def _decode(chunks: list[bytes]) -> str:
    return b"".join(chunks).decode("utf-8", errors="replace")


def _signal_group(process: asyncio.subprocess.Process, sig: signal.Signals) -> None:
    try:
        os.killpg(process.pid, sig)
    except (ProcessLookupError, PermissionError):
        # Group already gone.
        pass


async def _terminate(
    process: asyncio.subprocess.Process, readers: asyncio.Future, grace: float
) -> None:
    """Stop *process* and its group, then wait for the output pipes to close.

    SIGTERM goes to the group first; SIGKILL follows after *grace* seconds
    if the leader is still alive, and again once it has exited so members
    that ignored SIGTERM cannot keep the pipes open.
    """
    if process.returncode is None:
        _signal_group(process, signal.SIGTERM)
        try:
            await asyncio.wait_for(process.wait(), timeout=grace)
        except asyncio.TimeoutError:
            _signal_group(process, signal.SIGKILL)
            await process.wait()
    _signal_group(process, signal.SIGKILL)

    try:
        # wait_for cancels and awaits the readers if the pipes never close.
        await asyncio.wait_for(readers, timeout=grace)
    except asyncio.TimeoutError:
        pass
