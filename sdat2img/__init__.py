# sdat2img/__init__.py
"""
Rebuild raw Android partition images from <name>.transfer.list + <name>.new.dat.
"""
from .core import (
    BLOCK_SIZE,
    TransferList,
    TransferListFormatError,
    TruncatedInputError,
    build_image,
    parse_transfer_list,
    sdat2img,
)

__version__ = "1.0.0"

__all__ = [
    "BLOCK_SIZE",
    "TransferList",
    "TransferListFormatError",
    "TruncatedInputError",
    "build_image",
    "parse_transfer_list",
    "sdat2img",
    "__version__",
]
