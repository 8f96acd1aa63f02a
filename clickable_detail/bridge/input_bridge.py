"""Supervises the external click observer process.

The observer polls for pointer clicks on the host window and writes one
line per click to stdout. The bridge turns that byte stream into a FIFO
queue of text lines, or hands each line to a callback, and offers a
best-effort channel back into the process's stdin. It never interprets
what it carries.
"""

from __future__ import annotations

import logging
import queue
import subprocess
import threading
from typing import IO, Callable, Iterator, Optional, Sequence

from ..core.errors import SpawnError

logger = logging.getLogger(__name__)

READ_CHUNK = 4096


class InputBridge:
    """Owns one long-running observer subprocess and its reader threads."""

    def __init__(
        self,
        program: str,
        args: Sequence[str] = (),
        on_stderr: Optional[Callable[[str], None]] = None,
        on_exit: Optional[Callable[[Optional[int]], None]] = None,
        on_line: Optional[Callable[[str], None]] = None,
    ):
        self.program = program
        self.args = [str(a) for a in args]
        self.events: queue.Queue[str] = queue.Queue()
        self._on_stderr = on_stderr
        self._on_exit = on_exit
        self._on_line = on_line
        self._process: subprocess.Popen | None = None
        self._threads: list[threading.Thread] = []
        self._write_lock = threading.Lock()
        self._running = False

    @property
    def command(self) -> list[str]:
        return [self.program, *self.args]

    def start(self) -> "InputBridge":
        """Spawn the observer. Raises SpawnError if it cannot be created."""
        if self._running:
            return self

        try:
            self._process = subprocess.Popen(
                self.command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                bufsize=0,
            )
        except (OSError, ValueError) as e:
            raise SpawnError(f"Could not start click observer {self.program!r}: {e}") from e

        self._running = True
        logger.info("Started click observer (pid %s): %s", self._process.pid, " ".join(self.command))

        stdout_thread = threading.Thread(
            target=self._read_stdout, args=(self._process.stdout, self._process), daemon=True
        )
        stderr_thread = threading.Thread(
            target=self._read_stderr, args=(self._process.stderr,), daemon=True
        )
        self._threads = [stdout_thread, stderr_thread]
        for t in self._threads:
            t.start()
        return self

    def stop(self, timeout: float = 2.0) -> None:
        """Terminate the observer and wait for the reader threads."""
        process = self._process
        self._running = False
        if process is None:
            return

        if process.poll() is None:
            process.terminate()
            try:
                process.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                logger.warning("Click observer did not exit, killing it")
                process.kill()
                process.wait(timeout=timeout)

        if process.stdin:
            try:
                process.stdin.close()
            except OSError:
                pass

        for t in self._threads:
            t.join(timeout=timeout)
        self._threads.clear()
        self._process = None
        logger.info("Stopped click observer")

    def send(self, message: str) -> None:
        """Write ``message`` plus a newline to the observer's stdin.

        Empty messages are ignored. Delivery is not acknowledged and write
        failures are only logged.
        """
        if not message:
            return
        process = self._process
        if process is None or process.stdin is None:
            logger.debug("Dropping message for stopped observer: %r", message)
            return

        data = (message + "\n").encode("utf-8")
        with self._write_lock:
            try:
                process.stdin.write(data)
                process.stdin.flush()
            except (BrokenPipeError, ValueError, OSError) as e:
                logger.warning("Could not write to click observer: %s", e)

    def iter_events(self, timeout: Optional[float] = None) -> Iterator[str]:
        """Yield queued lines in arrival order until the queue stays empty for ``timeout``."""
        while True:
            try:
                yield self.events.get(timeout=timeout) if timeout else self.events.get_nowait()
            except queue.Empty:
                return

    @property
    def is_running(self) -> bool:
        """True until stdout closes; every line the observer wrote is queued by then."""
        return self._running

    @property
    def returncode(self) -> Optional[int]:
        return None if self._process is None else self._process.poll()

    def _read_stdout(self, stream: IO[bytes], process: Optional[subprocess.Popen] = None) -> None:
        """Split stdout into lines; chunks are not assumed to align with lines.

        Only the reader of the current process clears the running flag, so a
        reader that outlives a restart cannot mark the new observer stopped.
        """
        buffer = b""
        try:
            while True:
                chunk = stream.read(READ_CHUNK)
                if not chunk:
                    break
                buffer += chunk
                while b"\n" in buffer:
                    line, buffer = buffer.split(b"\n", 1)
                    self._emit(line)
        except (OSError, ValueError) as e:
            logger.debug("Observer stdout closed: %s", e)
        if buffer:
            self._emit(buffer)

        if process is self._process:
            self._running = False
        code = process.poll() if process else None
        logger.info("Click observer output closed (exit code %s)", code)
        if self._on_exit:
            try:
                self._on_exit(code)
            except Exception:
                logger.exception("Error in observer exit callback")

    def _emit(self, raw: bytes) -> None:
        line = raw.decode("utf-8", errors="replace").rstrip("\r")
        if not line:
            return
        if self._on_line is None:
            self.events.put(line)
            return
        try:
            self._on_line(line)
        except Exception:
            logger.exception("Error in observer line callback")

    def _read_stderr(self, stream: IO[bytes]) -> None:
        try:
            while True:
                chunk = stream.read(READ_CHUNK)
                if not chunk:
                    break
                text = chunk.decode("utf-8", errors="replace")
                if self._on_stderr is None:
                    logger.warning("Click observer: %s", text.rstrip())
                    continue
                try:
                    self._on_stderr(text)
                except Exception:
                    logger.exception("Error in observer stderr callback")
        except (OSError, ValueError) as e:
            logger.debug("Observer stderr closed: %s", e)


def start_bridge(
    program: str,
    args: Sequence[str] = (),
    on_stderr: Optional[Callable[[str], None]] = None,
    on_line: Optional[Callable[[str], None]] = None,
) -> InputBridge:
    """Create and start a bridge in one call."""
    return InputBridge(program, args, on_stderr=on_stderr, on_line=on_line).start()
