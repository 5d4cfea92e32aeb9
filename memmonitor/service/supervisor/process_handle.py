import selectors
import subprocess
from typing import List, Optional, Sequence

STDOUT = "stdout"
STDERR = "stderr"


class StreamBuffer:
    """Captured bytes of one child output stream, split into lines on demand."""

    def __init__(self):
        self.captured = bytearray()
        self._forwarded = 0  # bytes already handed out as complete lines

    def feed(self, chunk: bytes) -> None:
        self.captured.extend(chunk)

    def take_lines(self) -> List[str]:
        """Complete lines not yet handed out; a trailing partial line stays pending."""
        end = self.captured.rfind(b"\n", self._forwarded)
        if end == -1:
            return []
        block = bytes(self.captured[self._forwarded:end])
        self._forwarded = end + 1
        return [_decode(line).rstrip("\r") for line in block.split(b"\n")]

    @property
    def text(self) -> str:
        return _decode(self.captured)

    @property
    def remaining_text(self) -> str:
        return _decode(self.captured[self._forwarded:])


def _decode(data) -> str:
    return bytes(data).decode("utf-8", errors="replace")


class ProcessHandle:
    """
    A spawned child with its three pipes.

    Owned by ProcessSupervisor; only the supervisor reads, polls or closes it.
    """

    def __init__(self, command: Sequence[str], process: subprocess.Popen):
        self.command = list(command)
        self.process = process
        self.pid = process.pid
        self.stdout = StreamBuffer()
        self.stderr = StreamBuffer()
        self.exit_code: Optional[int] = None
        self.finalized = False

        self.selector = selectors.DefaultSelector()
        self.selector.register(process.stdout, selectors.EVENT_READ, STDOUT)
        self.selector.register(process.stderr, selectors.EVENT_READ, STDERR)

    def buffer_for(self, stream: str) -> StreamBuffer:
        return self.stdout if stream == STDOUT else self.stderr

    @property
    def open_streams(self) -> int:
        return len(self.selector.get_map())

    def __repr__(self):
        state = f"exit_code={self.exit_code}" if self.finalized else "running"
        return f"ProcessHandle(pid={self.pid}, command={self.command!r}, {state})"
