"""IOChannel: input queue and output accumulator for one engine."""

from collections import deque
from typing import Deque, Iterable, Optional, Union

InputData = Union[bytes, bytearray, str, Iterable[int]]


class IOChannel:
    """Buffered byte input and append-only byte output.

    Neither buffer is touched by the engine except through next_input()
    and emit(); clearing is always an explicit caller decision.
    """

    def __init__(self, stdin: Optional[InputData] = None):
        self._input: Deque[int] = deque()
        self._output = bytearray()
        if stdin is not None:
            self.push_input(stdin)

    def push_input(self, data: InputData) -> None:
        """Append bytes to the input queue.

        Args:
            data: bytes, a str (encoded as UTF-8), or an iterable of ints 0..255

        Raises:
            ValueError: If an int outside 0..255 is given
            TypeError: If data is a bare int rather than a sequence
        """
        if isinstance(data, str):
            data = data.encode("utf-8")
        elif isinstance(data, int):
            raise TypeError(f"Input must be bytes, str or an iterable of ints, not int: {data}")
        # bytes() validates the range of each int
        self._input.extend(bytes(data))

    def next_input(self) -> Optional[int]:
        """Pop the next input byte, or None at end of input."""
        if not self._input:
            return None
        return self._input.popleft()

    @property
    def pending_input(self) -> int:
        """Number of input bytes not yet consumed."""
        return len(self._input)

    def emit(self, value: int) -> None:
        self._output.append(value)

    def peek_output(self) -> bytes:
        """Accumulated output, left in place."""
        return bytes(self._output)

    def drain_output(self, clear: bool = False) -> bytes:
        """Accumulated output, optionally clearing the accumulator."""
        data = bytes(self._output)
        if clear:
            self.clear_output()
        return data

    def clear_input(self) -> None:
        self._input.clear()

    def clear_output(self) -> None:
        self._output.clear()

    def clear(self) -> None:
        """Empty both buffers."""
        self.clear_input()
        self.clear_output()

    def __repr__(self) -> str:
        return f"IOChannel(pending_input={self.pending_input}, output={len(self._output)} bytes)"
