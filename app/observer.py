"""
Runs the player listener as a child process and forwards its stdout lines.

The listener prints one JSON event per line; stderr is treated as debug chatter.
When the process ends (or cannot be started) `on_exit(returncode, reason)` is
called once.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Callable

log = logging.getLogger("observer")


class PlayerObserver:
    def __init__(self, command: list[str], *, on_line: Callable[[str], None],
                 on_exit: Callable[[int | None, str], None]):
        self.command = command
        self.on_line = on_line
        self.on_exit = on_exit
        self.process: asyncio.subprocess.Process | None = None

    async def run(self) -> int | None:
        log.info("Starting player listener: %s", " ".join(self.command))
        try:
            self.process = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            log.error("Failed to start player listener: %s", e)
            self.on_exit(None, f"failed to start: {e}")
            return None

        try:
            await asyncio.gather(self._pump_stdout(), self._pump_stderr())
            code = await self.process.wait()
        finally:
            if self.process.returncode is None:
                self.process.kill()
                await self.process.wait()
        log.warning("Player listener exited with code %s", code)
        self.on_exit(code, "")
        return code

    async def _lines(self, stream):
        while True:
            try:
                raw = await stream.readline()
            except ValueError as e:
                # Line longer than the StreamReader limit; the reader has skipped it
                log.warning("Dropping oversized listener line: %s", e)
                continue
            if not raw:
                return
            yield raw

    async def _pump_stdout(self) -> None:
        async for raw in self._lines(self.process.stdout):
            line = raw.decode("utf-8", errors="replace").strip()
            if line:
                log.debug("Raw listener output: %s", line)
                self.on_line(line)

    async def _pump_stderr(self) -> None:
        async for raw in self._lines(self.process.stderr):
            log.debug("listener: %s", raw.decode("utf-8", errors="replace").rstrip())

    def stop(self) -> None:
        if self.process is not None and self.process.returncode is None:
            log.info("Stopping player listener")
            self.process.terminate()
