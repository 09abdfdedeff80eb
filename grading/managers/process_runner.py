import os
import signal
import subprocess
import threading
import time
from typing import IO, List, Optional

from loguru import logger

from grading.errors import ExecutionError, ExecutionTimeout, GradingCancelled
from grading.models.results import ProcessOutput

DEFAULT_MAX_OUTPUT_BYTES = 64 * 1024


class _TailBuffer:
    """Keeps only the last `limit` bytes written to it."""

    def __init__(self, limit: int):
        self.limit = limit
        self.data = bytearray()
        self.truncated = False

    def feed(self, chunk: bytes) -> None:
        self.data += chunk
        overflow = len(self.data) - self.limit
        if overflow > 0:
            del self.data[:overflow]
            self.truncated = True

    def text(self) -> str:
        return self.data.decode("utf-8", errors="replace")


def _drain(stream: IO[bytes], buffer: _TailBuffer) -> None:
    with stream:
        for chunk in iter(lambda: stream.read1(65536), b""):
            buffer.feed(chunk)


class ProcessRunner:
    """
    Runs an argument list without a shell and waits for it with a deadline.

    stdout and stderr are drained on reader threads into buffers that keep
    only their last max_output_bytes, so a process flooding its output cannot
    grow the grader's memory. The wait polls cancel_event every
    poll_interval_seconds; a cancelled or timed-out process is killed along
    with its process group before the error is raised.
    """

    def __init__(
        self,
        poll_interval_seconds: float = 0.5,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
        reap_timeout_seconds: float = 5,
    ):
        self.poll_interval_seconds = poll_interval_seconds
        self.max_output_bytes = max_output_bytes
        self.reap_timeout_seconds = reap_timeout_seconds

    def run(
        self,
        cmd: List[str],
        timeout: float,
        cancel_event: Optional[threading.Event] = None,
    ) -> ProcessOutput:
        start_time = time.time()
        deadline = start_time + timeout

        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as e:
            raise ExecutionError(f"launch_failed: {cmd[0]}: {e}") from e

        stdout = _TailBuffer(self.max_output_bytes)
        stderr = _TailBuffer(self.max_output_bytes)
        readers = [
            threading.Thread(target=_drain, args=(process.stdout, stdout), daemon=True),
            threading.Thread(target=_drain, args=(process.stderr, stderr), daemon=True),
        ]
        for reader in readers:
            reader.start()

        while True:
            if cancel_event is not None and cancel_event.is_set():
                self._kill(process)
                raise GradingCancelled("grading_cancelled")

            remaining = deadline - time.time()
            if remaining <= 0:
                self._kill(process)
                raise ExecutionTimeout(f"execution_timeout: exceeded {timeout}s")

            try:
                process.wait(timeout=min(self.poll_interval_seconds, remaining))
                break
            except subprocess.TimeoutExpired:
                continue

        # A grandchild still holding the pipes delays this by at most reap_timeout_seconds
        for reader in readers:
            reader.join(timeout=self.reap_timeout_seconds)

        if stdout.truncated or stderr.truncated:
            logger.warning(
                "process_output_truncated",
                cmd=cmd[0],
                stdout_truncated=stdout.truncated,
                stderr_truncated=stderr.truncated,
                limit_bytes=self.max_output_bytes,
            )

        return ProcessOutput(
            returncode=process.returncode,
            stdout=stdout.text(),
            stderr=stderr.text(),
            duration_seconds=time.time() - start_time,
            output_truncated=stdout.truncated or stderr.truncated,
        )

    def _kill(self, process: subprocess.Popen) -> None:
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            logger.debug("process_already_exited", pid=process.pid)
        try:
            process.wait(timeout=self.reap_timeout_seconds)
        except subprocess.TimeoutExpired:
            logger.warning("process_not_reaped", pid=process.pid)
