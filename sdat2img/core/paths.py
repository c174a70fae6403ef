# sdat2img/core/paths.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .errors import UsageError
from .utils import IMG_SUFFIX, NEW_DAT_SUFFIX, TRANSFER_LIST_SUFFIX

@dataclass
class Operands:
    transfer_list: Path
    new_dat: Path
    output: Path

def resolve_operands(operands: Sequence[str], default_output: str = "system.img") -> Operands:
    """
    Two accepted shapes:
      <transfer_list> <new_dat> [<output>]   (output defaults to default_output)
      <dir> <stem> [<output>]                (-> <dir>/<stem>.transfer.list etc.)
    """
    if len(operands) not in (2, 3):
        raise UsageError(f"expected 2 or 3 operands, got {len(operands)}")
    first = Path(operands[0])
    explicit_out = Path(operands[2]) if len(operands) == 3 else None

    if first.is_file():
        return Operands(first, Path(operands[1]), explicit_out or Path(default_output))

    if first.is_dir():
        stem = operands[1]
        return Operands(
            first / f"{stem}{TRANSFER_LIST_SUFFIX}",
            first / f"{stem}{NEW_DAT_SUFFIX}",
            explicit_out or first / f"{stem}{IMG_SUFFIX}",
        )

    raise UsageError(f"{first} is neither a transfer.list file nor a directory")
