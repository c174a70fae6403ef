#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
sdat2img.batch

Convert every <name>.transfer.list + <name>.new.dat pair under a folder.

Public API
----------
run_batch(root, overwrite=False, progress=None) -> dict
  Returns stats: {'converted': N, 'skipped': S, 'errors': E}
"""

from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from .core import Sdat2ImgError, list_basename, sdat2img
from .core.utils import IMG_SUFFIX, NEW_DAT_SUFFIX, TRANSFER_LIST_SUFFIX

logger = logging.getLogger(__name__)

def _progress_emit(progress: Optional[Callable[[str], None]], msg: str) -> None:
    if progress:
        progress(msg)

def find_transfer_lists(root: Path) -> List[Path]:
    lists: List[Path] = []
    for dirpath, _, filenames in os.walk(root):
        for name in sorted(filenames):
            if name.lower().endswith(TRANSFER_LIST_SUFFIX):
                lists.append(Path(dirpath) / name)
    return sorted(lists)

def run_batch(
    root: Union[str, Path],
    overwrite: bool = False,
    progress: Optional[Callable[[str], None]] = None,
) -> Dict[str, int]:
    """
    Build <name>.img next to each <name>.transfer.list found under root.
    A failing pair is counted and reported; the rest still run.
    """
    root = Path(root).resolve()
    _progress_emit(progress, f"Scanning: {root}")
    lists = find_transfer_lists(root)
    stats = {"converted": 0, "skipped": 0, "errors": 0}

    if lists:
        _progress_emit(progress, f"Converting {len(lists)} *.transfer.list -> *.img")
    for lst in lists:
        base = list_basename(lst)  # e.g., "system"
        dat = lst.parent / f"{base}{NEW_DAT_SUFFIX}"
        img = lst.parent / f"{base}{IMG_SUFFIX}"

        if not dat.exists():
            _progress_emit(progress, f"  - skip {base}: {dat.name} not found next to {lst.name}")
            stats["skipped"] += 1
            continue
        if (not overwrite) and img.exists():
            _progress_emit(progress, f"  - skip (exists): {img.relative_to(root)}")
            stats["skipped"] += 1
            continue

        _progress_emit(progress, f"  - build: {img.relative_to(root)}")
        try:
            sdat2img(lst, dat, img)
        except (Sdat2ImgError, OSError) as ex:
            stats["errors"] += 1
            logger.error("FAILED %s: %s", lst, ex)
            _progress_emit(progress, f"  ! FAILED {base}: {ex}")
            # a half-built image would be skipped as existing next time
            try:
                img.unlink()
            except FileNotFoundError:
                pass
            continue
        stats["converted"] += 1

    _progress_emit(progress, "Done.")
    return stats
