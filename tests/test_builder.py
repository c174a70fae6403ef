import io
import logging
import os

import pytest

from sdat2img.core import (
    BLOCK_SIZE,
    TransferListFormatError,
    TruncatedInputError,
    build_image,
    read_transfer_list,
    sdat2img,
)


def block(fill: int) -> bytes:
    return bytes([fill]) * BLOCK_SIZE


class TrickleReader(io.RawIOBase):
    """Input stream that hands out at most 'step' bytes per read(), like a pipe."""

    def __init__(self, data: bytes, step: int = 1000):
        self._buf = io.BytesIO(data)
        self._step = step

    def readable(self):
        return True

    def read(self, n=-1):
        if n is None or n < 0:
            n = self._step
        return self._buf.read(min(n, self._step))


def test_s1_minimal_v1(write_pair, tmp_path):
    data = bytearray(4 * BLOCK_SIZE)
    data[2 * BLOCK_SIZE:3 * BLOCK_SIZE] = block(0xA5)
    tl, dat = write_pair("1\n4\nnew 2,0,4\n", bytes(data))
    out = tmp_path / "system.img"

    sdat2img(tl, dat, out)

    assert out.read_bytes() == bytes(data)


def test_s2_v2_header_skip_and_hole(write_pair, tmp_path):
    a, b, c, d = block(0x41), block(0x42), block(0x43), block(0x44)
    tl, dat = write_pair("2\n8\n0\n0\nnew 4,0,2,6,8\n", a + b + c + d)
    out = tmp_path / "system.img"

    stats = sdat2img(tl, dat, out)

    img = out.read_bytes()
    assert len(img) == 8 * BLOCK_SIZE
    assert img[:2 * BLOCK_SIZE] == a + b
    assert img[2 * BLOCK_SIZE:6 * BLOCK_SIZE] == bytes(4 * BLOCK_SIZE)
    assert img[6 * BLOCK_SIZE:] == c + d
    assert stats.blocks_copied == 4
    assert stats.ranges_copied == 2


def test_s3_erase_is_ignored(write_pair, tmp_path):
    pattern = bytes(range(256)) * (4 * BLOCK_SIZE // 256)
    tl, dat = write_pair("2\n4\n0\n0\nerase 2,0,4\nnew 2,0,4\n", pattern)
    out = tmp_path / "system.img"

    stats = sdat2img(tl, dat, out)

    assert out.read_bytes() == pattern
    assert stats.ranges_skipped == 1


def test_s4_bad_count_prefix_creates_no_output(write_pair, tmp_path):
    tl, dat = write_pair("1\n4\nnew 3,0,4\n", bytes(4 * BLOCK_SIZE))
    out = tmp_path / "system.img"

    with pytest.raises(TransferListFormatError):
        sdat2img(tl, dat, out)
    assert not out.exists()


def test_s5_odd_range_count(write_pair, tmp_path):
    tl, dat = write_pair("1\n4\nnew 3,0,4,8\n", bytes(4 * BLOCK_SIZE))
    out = tmp_path / "system.img"

    with pytest.raises(TransferListFormatError):
        sdat2img(tl, dat, out)
    assert not out.exists()


def test_s6_truncated_input(write_pair, tmp_path):
    tl, dat = write_pair("1\n4\nnew 2,0,4\n", block(1) * 3)
    out = tmp_path / "system.img"

    with pytest.raises(TruncatedInputError) as ei:
        sdat2img(tl, dat, out)
    assert "Truncated input stream" in str(ei.value)
    assert ei.value.expected == 4 * BLOCK_SIZE
    assert ei.value.got == 3 * BLOCK_SIZE
    # partial output is left behind
    assert out.exists()


def test_truncation_is_an_eoferror(write_pair, tmp_path):
    tl, dat = write_pair("1\n2\nnew 2,0,2\n", b"")
    with pytest.raises(EOFError):
        sdat2img(tl, dat, tmp_path / "out.img")


def test_trailing_zero_region_from_other_kinds(tmp_path):
    tl = read_transfer_list(io.StringIO("2\n16\n0\n0\nnew 2,0,1\nzero 2,1,16\n"))
    out = tmp_path / "out.img"

    stats = build_image(tl, io.BytesIO(block(7)), out)

    assert os.path.getsize(out) == 16 * BLOCK_SIZE
    assert stats.image_size == 16 * BLOCK_SIZE
    img = out.read_bytes()
    assert img[:BLOCK_SIZE] == block(7)
    assert img[BLOCK_SIZE:] == bytes(15 * BLOCK_SIZE)


def test_new_ranges_consume_input_in_manifest_order(tmp_path):
    # second 'new' line targets lower blocks but still reads later input
    tl = read_transfer_list(io.StringIO("1\n6\nnew 2,4,6\nnew 2,0,2\n"))
    data = block(1) + block(2) + block(3) + block(4)
    out = tmp_path / "out.img"

    build_image(tl, io.BytesIO(data), out)

    img = out.read_bytes()
    assert img[4 * BLOCK_SIZE:] == block(1) + block(2)
    assert img[:2 * BLOCK_SIZE] == block(3) + block(4)
    assert img[2 * BLOCK_SIZE:4 * BLOCK_SIZE] == bytes(2 * BLOCK_SIZE)


def test_large_range_spans_several_chunks(tmp_path):
    from sdat2img.core.builder import CHUNK_BLOCKS

    n = CHUNK_BLOCKS * 2 + 3
    data = b"".join(block(i % 251) for i in range(n))
    tl = read_transfer_list(io.StringIO(f"1\n{n + 1}\nnew 2,1,{n + 1}\n"))
    out = tmp_path / "out.img"
    seen = []

    build_image(tl, io.BytesIO(data), out, progress=lambda done, total: seen.append((done, total)))

    img = out.read_bytes()
    assert img[:BLOCK_SIZE] == bytes(BLOCK_SIZE)
    assert img[BLOCK_SIZE:] == data
    assert seen[-1] == (n, n)
    assert len(seen) == 3


def test_short_reads_are_retried(tmp_path):
    data = block(9) * 3
    tl = read_transfer_list(io.StringIO("1\n3\nnew 2,0,3\n"))
    out = tmp_path / "out.img"

    build_image(tl, TrickleReader(data, step=777), out)

    assert out.read_bytes() == data


def test_empty_manifest_gives_empty_image(tmp_path):
    tl = read_transfer_list(io.StringIO("1\n0\n"))
    out = tmp_path / "out.img"

    stats = build_image(tl, io.BytesIO(b""), out)

    assert out.exists()
    assert os.path.getsize(out) == 0
    assert stats.blocks_copied == 0


def test_existing_output_is_replaced(write_pair, tmp_path):
    tl, dat = write_pair("1\n1\nnew 2,0,1\n", block(3))
    out = tmp_path / "system.img"
    out.write_bytes(b"\xff" * (10 * BLOCK_SIZE))

    sdat2img(tl, dat, out)

    assert out.read_bytes() == block(3)


def test_rebuild_is_bit_identical(write_pair, tmp_path):
    data = b"".join(block(i) for i in range(1, 6))
    tl, dat = write_pair("2\n12\n0\n0\nerase 2,0,12\nnew 4,1,3,7,10\nzero 2,10,12\n", data)
    out = tmp_path / "system.img"

    sdat2img(tl, dat, out)
    first = out.read_bytes()
    out.unlink()
    sdat2img(tl, dat, out)

    assert out.read_bytes() == first
    assert len(first) == 12 * BLOCK_SIZE


def test_missing_input_file(tmp_path):
    tl = tmp_path / "system.transfer.list"
    tl.write_text("1\n1\nnew 2,0,1\n")
    out = tmp_path / "system.img"

    with pytest.raises(FileNotFoundError):
        sdat2img(tl, tmp_path / "system.new.dat", out)
    assert not out.exists()


class ReadOnlyStream:
    """Bare object with read() only, no fileno()."""

    def __init__(self, data: bytes):
        self._buf = io.BytesIO(data)

    def read(self, n=-1):
        return self._buf.read(n)


def _patch_fadvise(monkeypatch, func):
    from sdat2img.core import builder

    monkeypatch.setattr(builder.os, "posix_fadvise", func, raising=False)
    monkeypatch.setattr(builder.os, "POSIX_FADV_SEQUENTIAL", getattr(os, "POSIX_FADV_SEQUENTIAL", 2), raising=False)
    monkeypatch.setattr(builder.os, "POSIX_FADV_WILLNEED", getattr(os, "POSIX_FADV_WILLNEED", 3), raising=False)


def test_fadvise_failure_is_only_a_warning(write_pair, tmp_path, monkeypatch, caplog):
    def refuse(fd, offset, length, advice):
        raise OSError(22, "Invalid argument")

    _patch_fadvise(monkeypatch, refuse)
    tl, dat = write_pair("1\n2\nnew 2,0,2\n", block(4) * 2)
    out = tmp_path / "system.img"

    with caplog.at_level(logging.WARNING, logger="sdat2img.core.builder"):
        sdat2img(tl, dat, out)

    assert out.read_bytes() == block(4) * 2
    assert "Failed to set file advice" in caplog.text


def test_fadvise_called_for_real_files(write_pair, tmp_path, monkeypatch):
    calls = []
    _patch_fadvise(monkeypatch, lambda fd, offset, length, advice: calls.append(advice))
    tl, dat = write_pair("1\n1\nnew 2,0,1\n", block(5))

    sdat2img(tl, dat, tmp_path / "system.img")

    assert len(calls) == 2


def test_stream_without_fileno(tmp_path, monkeypatch):
    calls = []
    _patch_fadvise(monkeypatch, lambda *a: calls.append(a))
    tl = read_transfer_list(io.StringIO("1\n2\nnew 2,0,2\n"))
    out = tmp_path / "out.img"

    build_image(tl, ReadOnlyStream(block(6) * 2), out)

    assert out.read_bytes() == block(6) * 2
    assert calls == []


def test_leftover_input_warns(tmp_path, caplog):
    tl = read_transfer_list(io.StringIO("1\n1\nnew 2,0,1\n"))
    out = tmp_path / "out.img"

    with caplog.at_level(logging.WARNING, logger="sdat2img.core.builder"):
        build_image(tl, io.BytesIO(block(1) + block(2)), out)

    assert out.read_bytes() == block(1)
    assert "data past the 1 blocks" in caplog.text


def test_exact_input_does_not_warn(tmp_path, caplog):
    tl = read_transfer_list(io.StringIO("1\n1\nnew 2,0,1\n"))

    with caplog.at_level(logging.WARNING, logger="sdat2img.core.builder"):
        build_image(tl, io.BytesIO(block(1)), tmp_path / "out.img")

    assert "data past" not in caplog.text
