"""
Process Supervisor Module

Spawns the monitored command with stdin/stdout/stderr pipes, polls its
liveness, drains its output without ever blocking the sampling loop, and
reaps it exactly once.
"""
import os
import subprocess
import time
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence, Tuple, Union

from memmonitor.exceptions import HandleFinalizedError, SpawnError
from memmonitor.service.reporter.reporter import Reporter
from memmonitor.service.supervisor.process_handle import STDOUT, ProcessHandle
from memmonitor.util.file_utils import resolve_cmd, split_command
from memmonitor.util.log_config import setup_logger

READ_CHUNK_SIZE = 64 * 1024
# Upper bound of reads per drain call so a chatty child cannot starve sampling
MAX_READS_PER_DRAIN = 64

logger = setup_logger(__name__)


class ProcessSupervisor:

    def __init__(
        self,
        reporter: Optional[Reporter] = None,
        terminate_timeout: float = 5.0,
        drain_timeout: float = 5.0,
    ):
        self.reporter = reporter
        self.terminate_timeout = terminate_timeout
        self.drain_timeout = drain_timeout

    def start(self, command: Union[str, Sequence[str]]) -> ProcessHandle:
        """
        Launch the command with three pipes attached.

        Raises:
            SpawnError: If the OS cannot create the process
        """
        try:
            argv = split_command(command)
        except ValueError as e:
            raise SpawnError([command] if isinstance(command, str) else command, str(e)) from e

        try:
            argv[0] = resolve_cmd(argv[0])
            process = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except (OSError, ValueError, subprocess.SubprocessError) as e:
            raise SpawnError(argv, str(e)) from e

        logger.debug(f"Started process with PID: {process.pid}")
        return ProcessHandle(argv, process)

    @contextmanager
    def supervise(self, command: Union[str, Sequence[str]]) -> Iterator[ProcessHandle]:
        """Start a command and guarantee it is finalized when the block exits."""
        handle = self.start(command)
        try:
            yield handle
        finally:
            if not handle.finalized:
                self.finalize(handle)

    def is_running(self, handle: ProcessHandle) -> bool:
        self._ensure_open(handle)
        return handle.process.poll() is None

    def drain_available(self, handle: ProcessHandle) -> Tuple[bytes, bytes]:
        """
        Read whatever output is available right now, without blocking.

        Complete stdout lines are forwarded to the reporter at info level and
        stderr lines at error level; a trailing partial line is held back
        until its newline arrives or the handle is finalized.

        Returns:
            (stdout_chunk, stderr_chunk), either possibly empty
        """
        self._ensure_open(handle)

        stdout_chunk = bytearray()
        stderr_chunk = bytearray()
        for _ in range(MAX_READS_PER_DRAIN):
            events = handle.selector.select(timeout=0) if handle.open_streams else []
            if not events:
                break
            for key, _mask in events:
                data = self._read_ready(handle, key)
                (stdout_chunk if key.data == STDOUT else stderr_chunk).extend(data)

        self._forward_lines(handle)
        return bytes(stdout_chunk), bytes(stderr_chunk)

    def finalize(self, handle: ProcessHandle) -> int:
        """
        Stop the child if needed, read its output to end-of-stream, close all
        three pipes and reap it.

        Must be called exactly once per handle.

        Returns:
            The child's exit code (negative signal number if it was killed)
        """
        self._ensure_open(handle)
        try:
            if handle.process.poll() is None:
                self._terminate(handle)
            self._drain_to_eof(handle)
        finally:
            handle.selector.close()
            self._close_pipes(handle)
            handle.exit_code = handle.process.wait()
            handle.finalized = True

        logger.debug(f"Process {handle.pid} finalized with exit code {handle.exit_code}")
        return handle.exit_code

    def _read_ready(self, handle: ProcessHandle, key) -> bytes:
        # The selector reported the pipe readable, so a single read cannot block
        data = os.read(key.fd, READ_CHUNK_SIZE)
        if data:
            handle.buffer_for(key.data).feed(data)
        else:
            handle.selector.unregister(key.fileobj)
        return data

    def _forward_lines(self, handle: ProcessHandle) -> None:
        if self.reporter is None:
            return
        for line in handle.stdout.take_lines():
            self.reporter.command_stdout_line(line)
        for line in handle.stderr.take_lines():
            self.reporter.command_stderr_line(line)

    def _drain_to_eof(self, handle: ProcessHandle) -> None:
        deadline = time.monotonic() + self.drain_timeout
        while handle.open_streams:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.warning(
                    f"Output of PID {handle.pid} still open after {self.drain_timeout}s "
                    f"(inherited by another process?); closing pipes"
                )
                return
            for key, _mask in handle.selector.select(timeout=remaining):
                self._read_ready(handle, key)

    def _terminate(self, handle: ProcessHandle) -> None:
        logger.info(f"Stopping command (PID {handle.pid})")
        handle.process.terminate()
        try:
            handle.process.wait(timeout=self.terminate_timeout)
        except subprocess.TimeoutExpired:
            logger.warning("Process didn't terminate gracefully, killing...")
            handle.process.kill()
            handle.process.wait()

    @staticmethod
    def _close_pipes(handle: ProcessHandle) -> None:
        for pipe in (handle.process.stdin, handle.process.stdout, handle.process.stderr):
            if pipe is None:
                continue
            try:
                pipe.close()
            except BrokenPipeError:
                # stdin of an exited child; the descriptor is released regardless
                pass

    @staticmethod
    def _ensure_open(handle: ProcessHandle) -> None:
        if handle.finalized:
            raise HandleFinalizedError(f"Process handle for PID {handle.pid} is already finalized")
