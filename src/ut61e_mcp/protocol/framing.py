"""Frame extraction from the meter's serial byte stream.

Frame layout::

    +-------+----------+------+------+------+-------+------+------+----+----+
    | Range | Digits   | Mode | Info | Rel  | Limit | Kind | Hold | CR | LF |
    | 1 B   | 5 bytes  | 1 B  | 1 B  | 1 B  | 1 B   | 1 B  | 1 B  |    |    |
    +-------+----------+------+------+------+-------+------+------+----+----+

- Every frame is exactly 14 bytes and ends in 0x0D 0x0A
- Only the low nibble of each data byte is meaningful
- There is no checksum; a terminator seen before 14 bytes have
  arrived means the frame was truncated and is dropped
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

FRAME_SIZE = 14
CR = 0x0D
LF = 0x0A
TERMINATOR = bytes([CR, LF])


@dataclass(frozen=True)
class Frame:
    """A complete 14-byte meter frame, terminator included."""

    data: bytes

    def __post_init__(self) -> None:
        if len(self.data) != FRAME_SIZE:
            raise ValueError(
                f"Frame must be {FRAME_SIZE} bytes, got {len(self.data)}"
            )
        object.__setattr__(self, "data", bytes(self.data))

    def __bytes__(self) -> bytes:
        return self.data

    def __getitem__(self, index):
        return self.data[index]

    def __len__(self) -> int:
        return FRAME_SIZE

    def __repr__(self) -> str:
        return f"Frame({self.data.hex(' ')})"


class FrameStream:
    """Reassembles frames from a byte stream, one byte at a time.

    The last ``FRAME_SIZE`` bytes are held in a fixed ring buffer. When
    full, a new byte overwrites the oldest one. Any LF clears the window;
    it is emitted as a frame only if it follows a CR and the window is
    full at that point.

    Usage::

        stream = FrameStream()
        for byte in source:
            frame = stream.push(byte)
            if frame is not None:
                handle(frame)
    """

    def __init__(self) -> None:
        self._buf = bytearray(FRAME_SIZE)
        self._head = 0
        self._len = 0

    def __len__(self) -> int:
        return self._len

    @property
    def full(self) -> bool:
        return self._len == FRAME_SIZE

    def _last(self) -> int | None:
        if self._len == 0:
            return None
        return self._buf[(self._head + self._len - 1) % FRAME_SIZE]

    def _append(self, byte: int) -> None:
        if self._len == FRAME_SIZE:
            # Evict the oldest byte
            self._head = (self._head + 1) % FRAME_SIZE
            self._len -= 1
        self._buf[(self._head + self._len) % FRAME_SIZE] = byte
        self._len += 1

    def _contents(self) -> bytes:
        end = self._head + self._len
        if end <= FRAME_SIZE:
            return bytes(self._buf[self._head:end])
        return bytes(self._buf[self._head:]) + bytes(self._buf[:end - FRAME_SIZE])

    def reset(self) -> None:
        """Drop any partially received frame."""
        self._head = 0
        self._len = 0

    def push(self, byte: int) -> Frame | None:
        """Push one byte into the stream.

        Args:
            byte: The received byte (0-255).

        Returns:
            A ``Frame`` when this byte completes one, else ``None``.
        """
        if not 0 <= byte <= 0xFF:
            raise ValueError(f"Byte out of range: {byte}")

        prev = self._last()
        self._append(byte)

        if byte != LF:
            return None

        if prev == CR and self.full:
            frame = Frame(self._contents())
            self.reset()
            return frame

        logger.debug("Dropping %d bytes on early terminator", self._len)
        self.reset()
        return None

    def feed(self, data: bytes) -> list[Frame]:
        """Push every byte of ``data`` in order and collect completed frames."""
        frames: list[Frame] = []
        for byte in data:
            frame = self.push(byte)
            if frame is not None:
                frames.append(frame)
        return frames
