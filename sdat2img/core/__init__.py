# sdat2img/core/__init__.py
from .models import BLOCK_SIZE, KNOWN_CMDS, BlockRange, CommandSet, TransferList
from .errors import Sdat2ImgError, TransferListFormatError, TruncatedInputError, UsageError
from .ranges import parse_ranges, pair_ranges, parse_block_ranges
from .transfer_list import parse_transfer_list, read_transfer_list
from .builder import BuildStats, build_image, sdat2img
from .paths import Operands, resolve_operands
from .utils import human_size, list_basename
from .config import load_cfg, save_cfg, config_path

__all__ = [
    "BLOCK_SIZE", "KNOWN_CMDS", "BlockRange", "CommandSet", "TransferList",
    "Sdat2ImgError", "TransferListFormatError", "TruncatedInputError", "UsageError",
    "parse_ranges", "pair_ranges", "parse_block_ranges",
    "parse_transfer_list", "read_transfer_list",
    "BuildStats", "build_image", "sdat2img",
    "Operands", "resolve_operands",
    "human_size", "list_basename",
    "load_cfg", "save_cfg", "config_path",
    "setup_logging",
]

# ---- simple logging toggle for the package ----
import logging

def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s"
    )
