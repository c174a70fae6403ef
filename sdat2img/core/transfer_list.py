# sdat2img/core/transfer_list.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import Iterable, Iterator, Optional, Tuple, Union

from .errors import TransferListFormatError
from .models import KNOWN_CMDS, TransferList
from .ranges import parse_block_ranges

logger = logging.getLogger(__name__)

SUPPORTED_VERSIONS = (1, 2, 3, 4)

# transfer.list version -> Android release that introduced it
ANDROID_RELEASES = {
    1: "Android 5.0",
    2: "Android 5.1",
    3: "Android 6.x",
    4: "Android 7.x or above",
}

PathLike = Union[str, Path]

class _Lines:
    """Numbered line reader over any iterable of text lines."""

    def __init__(self, lines: Iterable[str], source: Optional[PathLike]) -> None:
        self._it: Iterator[str] = iter(lines)
        self.source = source
        self.line_no = 0

    def __iter__(self) -> Iterator[Tuple[int, str]]:
        for raw in self._it:
            self.line_no += 1
            yield self.line_no, raw.strip()

    def error(self, msg: str, line_no: Optional[int] = None) -> TransferListFormatError:
        return TransferListFormatError(msg, self.source, line_no if line_no is not None else self.line_no)

    def header_int(self, what: str) -> int:
        raw = next(self._it, None)
        if raw is None:
            raise self.error(f"Unexpected end of file, expected {what}", self.line_no + 1)
        self.line_no += 1
        val = raw.strip()
        if not val:
            raise self.error(f"Missing {what}")
        try:
            return int(val)
        except ValueError:
            raise self.error(f"Bad {what}: {val!r}") from None

def read_transfer_list(lines: Iterable[str], source: Optional[PathLike] = None) -> TransferList:
    """
    Decode a transfer.list from an iterable of lines.

    Header: version, total_blocks, and for v2+ two stash lines
    (entries, max blocks). Everything after is '<kind> <rangeset>'.
    """
    rd = _Lines(lines, source)

    version = rd.header_int("version")
    if version not in SUPPORTED_VERSIONS:
        raise rd.error(f"Unsupported transfer.list version: {version}")
    logger.info("%s detected (transfer.list v%d)", ANDROID_RELEASES[version], version)

    tl = TransferList(version=version, total_blocks=rd.header_int("total blocks"))
    if version >= 2:
        tl.stash_entries = rd.header_int("stash entry count")
        tl.stash_max_blocks = rd.header_int("stash max blocks")

    for line_no, line in rd:
        if not line:
            continue
        parts = line.split()
        if len(parts) != 2:
            raise rd.error(f"Expected '<command> <rangeset>', got {line!r}", line_no)
        kind, token = parts
        if kind not in KNOWN_CMDS:
            raise rd.error(f"Unknown command: {kind}", line_no)
        try:
            ranges = parse_block_ranges(token)
        except TransferListFormatError as e:
            raise e.at(source, line_no) from None
        for rng in ranges:
            tl.commands.add(kind, rng)

    logger.info("Parsed %d commands", tl.count())
    max_end = tl.max_end()
    if tl.total_blocks != max_end:
        logger.warning(
            "Header declares %d blocks but ranges end at block %d", tl.total_blocks, max_end
        )
    return tl

def parse_transfer_list(path: PathLike) -> TransferList:
    """Parse a transfer.list file, streaming it line by line."""
    path = Path(path)
    with path.open("r", encoding="utf-8", errors="replace") as f:
        return read_transfer_list(f, source=path)
