# sdat2img/core/builder.py
from __future__ import annotations
import io
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Union

from .errors import TruncatedInputError
from .models import BLOCK_SIZE, CMD_NEW, BlockRange, TransferList
from .transfer_list import parse_transfer_list

logger = logging.getLogger(__name__)

ProgressCB = Callable[[int, int], None]  # (blocks_done, blocks_total)

# Blocks per read/write round trip
CHUNK_BLOCKS = 256

@dataclass
class BuildStats:
    blocks_copied: int = 0
    ranges_copied: int = 0
    ranges_skipped: int = 0
    image_size: int = 0

def _advise_sequential(stream: BinaryIO) -> None:
    if not hasattr(os, "posix_fadvise"):
        return
    try:
        fd = stream.fileno()
    except (io.UnsupportedOperation, AttributeError, ValueError):
        return
    try:
        os.posix_fadvise(fd, 0, 0, os.POSIX_FADV_SEQUENTIAL)
        os.posix_fadvise(fd, 0, 0, os.POSIX_FADV_WILLNEED)
    except OSError as e:
        logger.warning("Failed to set file advice on input: %s", e)

def _read_exact(stream: BinaryIO, n: int) -> bytes:
    """Read n bytes, looping over short reads; returns fewer only at EOF."""
    buf = stream.read(n)
    if len(buf) == n or not buf:
        return buf
    parts = [buf]
    got = len(buf)
    while got < n:
        more = stream.read(n - got)
        if not more:
            break
        parts.append(more)
        got += len(more)
    return b"".join(parts)

def _copy_range(
    rng: BlockRange,
    fin: BinaryIO,
    fout: BinaryIO,
    stats: BuildStats,
    total: int,
    progress: Optional[ProgressCB],
) -> None:
    logger.debug("Copying %d blocks into position %d...", rng.size, rng.begin)
    fout.seek(rng.byte_offset)
    left = rng.size
    while left > 0:
        n = min(left, CHUNK_BLOCKS)
        want = n * BLOCK_SIZE
        data = _read_exact(fin, want)
        if len(data) != want:
            raise TruncatedInputError(want, len(data), begin=rng.end - left)
        fout.write(data)
        left -= n
        stats.blocks_copied += n
        if progress:
            progress(stats.blocks_copied, total)
    stats.ranges_copied += 1

def build_image(
    tl: TransferList,
    fin: BinaryIO,
    out_img_path: Union[str, Path],
    progress: Optional[ProgressCB] = None,
) -> BuildStats:
    """
    Lay the blocks of 'fin' into out_img_path following tl's 'new' ranges.
    - fin must be positioned at the first data block and is read forward only
    - the image ends up exactly max_end * BLOCK_SIZE bytes; untouched areas are zero
    - a partial image is left behind on failure
    """
    size = tl.image_size()
    total = tl.new_blocks()
    stats = BuildStats(image_size=size)
    logger.info("New file size: %d bytes", size)

    _advise_sequential(fin)
    with open(out_img_path, "wb") as fout:
        for kind, rng in tl.commands:
            if kind == CMD_NEW:
                _copy_range(rng, fin, fout, stats, total, progress)
            else:
                # output is zero-filled by the final truncate
                logger.debug("Skipping command %s %d-%d", kind, rng.begin, rng.end)
                stats.ranges_skipped += 1
        if fin.read(1):
            logger.warning(
                "Input has data past the %d blocks the new ranges consume; ignoring the rest", total
            )
        fout.truncate(size)

    logger.info("Done! Output image: %s", out_img_path)
    return stats

def sdat2img(
    transfer_list_path: Union[str, Path],
    new_dat_path: Union[str, Path],
    out_img_path: Union[str, Path],
    progress: Optional[ProgressCB] = None,
) -> BuildStats:
    """Parse the transfer.list, then build the image from new.dat."""
    tl = parse_transfer_list(transfer_list_path)
    with open(new_dat_path, "rb") as fin:
        return build_image(tl, fin, out_img_path, progress=progress)
