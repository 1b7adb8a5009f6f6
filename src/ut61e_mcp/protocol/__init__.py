"""Protocol layer: frame extraction, lookup tables, and frame decoding."""

from .framing import Frame, FrameStream, FRAME_SIZE
from .parser import decode_frame, normalize
from .errors import DecodeError, ReadExhaustedError
