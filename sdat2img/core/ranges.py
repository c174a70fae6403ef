from __future__ import annotations
import re
from typing import List, Sequence

from .errors import TransferListFormatError
from .models import BlockRange

_UINT = re.compile(r"[0-9]+")

def _to_uint(tok: str) -> int:
    t = tok.strip()
    if not _UINT.fullmatch(t):
        raise TransferListFormatError(f"Bad rangeset value: {tok!r}")
    return int(t)

def parse_ranges(token: str) -> List[int]:
    """
    Ranges format: <count>,<i1>,<i2>,...,<icount>
    'count' is the NUMBER OF INTEGERS that follow (must be even → pairs).
    Returns [i1 .. icount]; the leading count is consumed.
    """
    parts = token.split(",")
    nums = [_to_uint(p) for p in parts]
    cnt = nums[0]
    if len(nums) != cnt + 1:
        raise TransferListFormatError(
            f"Bad rangeset {token!r}: count says {cnt} but {len(nums) - 1} follow"
        )
    if cnt % 2 != 0:
        raise TransferListFormatError(f"Bad rangeset {token!r}: odd integer count {cnt}")
    return nums[1:]

def pair_ranges(values: Sequence[int]) -> List[BlockRange]:
    """[0,3,10,11] -> [BlockRange(0,3), BlockRange(10,11)]"""
    if len(values) % 2 != 0:
        raise TransferListFormatError(f"Odd number of range bounds: {len(values)}")
    out: List[BlockRange] = []
    for i in range(0, len(values), 2):
        begin, end = values[i], values[i + 1]
        if end <= begin:
            raise TransferListFormatError(f"Empty or inverted range {begin},{end}")
        out.append(BlockRange(begin, end))
    return out

def parse_block_ranges(token: str) -> List[BlockRange]:
    return pair_ranges(parse_ranges(token))
