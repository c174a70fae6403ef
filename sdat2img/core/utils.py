from __future__ import annotations
import math
import os
from pathlib import Path
from typing import Optional

TRANSFER_LIST_SUFFIX = ".transfer.list"
NEW_DAT_SUFFIX = ".new.dat"
IMG_SUFFIX = ".img"

def human_size(n: Optional[int]) -> str:
    if n is None or n < 0: return "?"
    if n == 0: return "0 B"
    units = ["B","KB","MB","GB","TB"]
    i = min(int(math.floor(math.log(n, 1024))), len(units) - 1)
    return f"{n/(1024**i):.2f} {units[i]}"

def list_basename(path: Path) -> str:
    """Return 'system' from '.../system.transfer.list' (not 'system.transfer')."""
    name = path.name
    if name.lower().endswith(TRANSFER_LIST_SUFFIX):
        return name[:-len(TRANSFER_LIST_SUFFIX)]
    return os.path.splitext(name)[0]
