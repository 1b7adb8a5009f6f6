"""Read loop tying a byte source to the frame stream and decoder."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from .models.reading import Reading
from .protocol.errors import DecodeError, ReadExhaustedError
from .protocol.framing import FRAME_SIZE, Frame, FrameStream
from .protocol.parser import decode_frame
from .transport import ByteSource

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = FRAME_SIZE * 4
DEFAULT_MAX_DISCARDS = DEFAULT_MAX_ATTEMPTS // FRAME_SIZE


class MeterReader:
    """Pulls bytes from a source and yields decoded readings.

    Each reader owns its own ``FrameStream``, so it must be driven from
    a single thread.
    """

    def __init__(
        self,
        source: ByteSource,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        max_discards: int = DEFAULT_MAX_DISCARDS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be positive, got {max_attempts}")
        if max_discards < 1:
            raise ValueError(f"max_discards must be positive, got {max_discards}")
        self._source = source
        self._max_attempts = max_attempts
        self._max_discards = max_discards
        self._stream = FrameStream()

    @property
    def source(self) -> ByteSource:
        return self._source

    def read_frame(self) -> Frame:
        """Read bytes until a frame completes.

        Every call to the source counts as an attempt, including ones
        that time out without data.

        Raises:
            ReadExhaustedError: If ``max_attempts`` reads produce no frame.
        """
        for _ in range(self._max_attempts):
            byte = self._source.read_byte()
            if byte is None:
                continue
            frame = self._stream.push(byte)
            if frame is not None:
                logger.debug("Received %r", frame)
                return frame
        raise ReadExhaustedError(self._max_attempts)

    def read_reading(self) -> Reading:
        """Read and decode the next frame.

        Raises:
            ReadExhaustedError: If no frame arrives in time.
            DecodeError: If the frame cannot be decoded.
        """
        return decode_frame(self.read_frame())

    def iter_readings(self, count: int | None = None) -> Iterator[Reading]:
        """Yield decoded readings, skipping frames that fail to decode.

        Args:
            count: Stop after this many readings; ``None`` reads forever.

        Raises:
            ReadExhaustedError: If the source goes quiet.
            DecodeError: If ``max_discards`` frames in a row fail to decode;
                the last failure is raised.
        """
        produced = 0
        discarded = 0
        while count is None or produced < count:
            frame = self.read_frame()
            try:
                reading = decode_frame(frame)
            except DecodeError as e:
                discarded += 1
                if discarded >= self._max_discards:
                    raise
                logger.warning("Discarding frame %s: %s", e.frame.hex(" "), e)
                continue
            discarded = 0
            produced += 1
            yield reading
