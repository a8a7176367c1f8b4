# fleet_digest/llm/observers.py
"""
Presentation hooks for a streamed LLM turn.

The conversation client reports stream progress to a StreamObserver. What the
observer does with it has no effect on the returned answer: the client
accumulates the answer from output_text deltas on its own.
"""

import math
import shutil
import sys
from typing import Final, Protocol, TextIO

__all__: list[str] = ['ConsoleStreamObserver', 'NullObserver', 'StreamObserver']

# ANSI: cursor up one line, then clear that line
ERASE_PREVIOUS_LINE: Final[str] = '\x1b[1A\x1b[2K'


class StreamObserver(Protocol):
    """Callbacks invoked in stream order during one turn."""

    def on_progress(self) -> None: ...

    def on_reasoning_delta(self, delta: str) -> None: ...

    def on_reasoning_done(self, text: str) -> None: ...

    def on_output_delta(self, delta: str) -> None: ...


class NullObserver:
    """Observer that ignores every event."""

    def on_progress(self) -> None:
        pass

    def on_reasoning_delta(self, delta: str) -> None:
        pass

    def on_reasoning_done(self, text: str) -> None:
        pass

    def on_output_delta(self, delta: str) -> None:
        pass


class ConsoleStreamObserver:
    """
    Streams a turn to a terminal.

    The reasoning trace is shown live while the model thinks, then erased
    once it is complete so only the answer remains on screen. Erasing counts
    the terminal rows the trace occupied, including rows created by wrapping
    long lines at the terminal width.

    Args:
        stream: Text stream to write to. Defaults to sys.stdout.
        show_reasoning: Set False to never display the reasoning trace.
    """

    def __init__(self, stream: TextIO | None = None, show_reasoning: bool = True) -> None:
        self._stream: TextIO = stream if stream is not None else sys.stdout
        self._show_reasoning: bool = show_reasoning
        self._reasoning_shown: str = ''
        self._progress_shown: bool = False

    def on_progress(self) -> None:
        # in_progress can repeat within one turn
        if self._progress_shown:
            return
        self._progress_shown = True
        self._write('Please wait...\n')

    def on_reasoning_delta(self, delta: str) -> None:
        if not self._show_reasoning:
            return
        self._reasoning_shown += delta
        self._write(delta)

    def on_reasoning_done(self, text: str) -> None:
        if not self._reasoning_shown:
            return

        rows: int = self._count_rows(self._reasoning_shown)
        # The cursor sits on the last reasoning row: clear it, then the rows above
        self._write('\r\x1b[2K' + ERASE_PREVIOUS_LINE * (rows - 1) + '\r')
        self._reasoning_shown = ''

    def on_output_delta(self, delta: str) -> None:
        self._write(delta)

    def finish_turn(self) -> None:
        """Terminate the answer line and reset per-turn state."""
        self._write('\n')
        self._reasoning_shown = ''
        self._progress_shown = False

    def _write(self, text: str) -> None:
        self._stream.write(text)
        self._stream.flush()

    @staticmethod
    def _count_rows(text: str) -> int:
        width: int = max(shutil.get_terminal_size().columns, 1)
        return sum(max(math.ceil(len(line) / width), 1) for line in text.split('\n'))
