"""Tests for frame extraction from the byte stream."""

import pytest

from ut61e_mcp.protocol.framing import Frame, FrameStream, FRAME_SIZE, CR, LF

# 0.1234 V DC, auto range
SAMPLE = bytes.fromhex("30 30 31 32 33 34 3b 30 30 30 3a 30 0d 0a")


def _push_all(stream: FrameStream, data: bytes) -> list:
    return [stream.push(b) for b in data]


def test_frame_size():
    """Frames are always 14 bytes long."""
    assert FRAME_SIZE == 14
    assert len(SAMPLE) == FRAME_SIZE


def test_single_frame_emitted_on_last_byte():
    """Only the final LF of a clean frame should produce output."""
    stream = FrameStream()
    results = _push_all(stream, SAMPLE)

    assert all(r is None for r in results[:-1])
    assert results[-1] == Frame(SAMPLE)
    assert bytes(results[-1]) == SAMPLE


def test_arbitrary_payload_bytes():
    """Any 12 data bytes followed by CR LF make a frame."""
    payload = bytes([0xFF, 0x00, 0x7F, 0x80, 0x01, 0x02, 0x03, 0x04, 0x05, 0x06, 0x07, 0x08])
    stream = FrameStream()
    frames = stream.feed(payload + bytes([CR, LF]))
    assert frames == [Frame(payload + bytes([CR, LF]))]


def test_window_cleared_after_frame():
    """The window is empty right after a frame is emitted."""
    stream = FrameStream()
    stream.feed(SAMPLE)
    assert len(stream) == 0


def test_consecutive_frames():
    """Back-to-back frames are each emitted once."""
    stream = FrameStream()
    frames = stream.feed(SAMPLE * 3)
    assert len(frames) == 3
    assert all(bytes(f) == SAMPLE for f in frames)


def test_early_terminator_resets_without_emitting():
    """A CR LF before the window is full drops the partial frame."""
    stream = FrameStream()
    results = _push_all(stream, SAMPLE[:5] + bytes([CR, LF]))
    assert all(r is None for r in results)
    assert len(stream) == 0


def test_lone_lf_resets():
    """An LF not preceded by CR resets the window, even when full."""
    stream = FrameStream()
    stream.feed(SAMPLE[:12] + b"\x00")
    assert len(stream) == 13
    assert stream.push(LF) is None
    assert len(stream) == 0


def test_resynchronizes_after_noise():
    """A spurious LF mid-stream costs one frame, not the stream."""
    stream = FrameStream()
    noisy = SAMPLE[:6] + bytes([LF]) + SAMPLE[6:] + SAMPLE
    frames = stream.feed(noisy)
    assert frames == [Frame(SAMPLE)]


def test_leading_garbage_is_evicted():
    """Extra leading bytes fall out of the window before the terminator."""
    stream = FrameStream()
    frames = stream.feed(b"\x11\x22\x33" + SAMPLE)
    assert frames == [Frame(SAMPLE)]


def test_overlong_run_keeps_last_bytes():
    """Only the 14 most recent bytes form the frame."""
    stream = FrameStream()
    data = bytes(range(0x20, 0x40)) + SAMPLE[-FRAME_SIZE:]
    frames = stream.feed(data)
    assert bytes(frames[0]) == SAMPLE


def test_reset_drops_partial():
    """reset() discards accumulated bytes."""
    stream = FrameStream()
    stream.feed(SAMPLE[:10])
    stream.reset()
    assert len(stream) == 0
    assert stream.feed(SAMPLE[10:]) == []


def test_push_rejects_non_byte():
    """Values outside 0-255 are rejected."""
    stream = FrameStream()
    with pytest.raises(ValueError):
        stream.push(256)
    with pytest.raises(ValueError):
        stream.push(-1)


def test_frame_length_enforced():
    """Frame refuses data that is not 14 bytes."""
    with pytest.raises(ValueError):
        Frame(b"\x00" * 13)
    with pytest.raises(ValueError):
        Frame(b"\x00" * 15)


def test_frame_is_immutable():
    """Frames cannot be modified after construction."""
    frame = Frame(bytearray(SAMPLE))
    assert isinstance(frame.data, bytes)
    with pytest.raises(AttributeError):
        frame.data = b""


def test_frame_repr():
    """Frame repr should show the bytes in hex."""
    r = repr(Frame(SAMPLE))
    assert "0d 0a" in r
