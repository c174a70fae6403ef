# sdat2img/cli.py
from __future__ import annotations
import argparse
import sys
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeRemainingColumn
)

from .batch import run_batch
from .core import (
    Sdat2ImgError,
    TransferListFormatError,
    TruncatedInputError,
    UsageError,
    build_image,
    human_size,
    load_cfg,
    parse_transfer_list,
    resolve_operands,
    setup_logging,
)
from .tui import confirm_overwrite, section

console = Console()

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_FORMAT = 2
EXIT_TRUNCATED = 3
EXIT_IO = 4

USAGE_EPILOG = """\
operands:
  <transfer_list> <new_dat> [<output_img>]
  <directory> <stem> [<output_img>]   uses <stem>.transfer.list / <stem>.new.dat,
                                      writes <stem>.img unless output is given
"""

class _ArgumentParser(argparse.ArgumentParser):
    """Bad flags are usage errors (exit 1), not argparse's exit 2."""

    def error(self, message: str):
        raise UsageError(message)

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = _ArgumentParser(
        prog="sdat2img",
        description="Rebuild a raw image from <name>.transfer.list + <name>.new.dat",
        epilog=USAGE_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    ap.add_argument("operands", nargs="*", help="see below")
    ap.add_argument("--scan", metavar="ROOT", help="Convert every transfer.list found under ROOT")
    ap.add_argument("--overwrite", action="store_true", help="With --scan: rebuild images that already exist")
    ap.add_argument("-y", "--yes", action="store_true", help="Overwrite the output image without asking")
    ap.add_argument("-q", "--quiet", action="store_true", help="No progress bar")
    ap.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return ap.parse_args(argv)

def _usage(msg: str) -> int:
    console.print(f"[red]Usage error:[/] {escape(msg)}")
    console.print(USAGE_EPILOG, markup=False, highlight=False)
    return EXIT_USAGE

def _run_scan(root: str, overwrite: bool) -> int:
    section(console, "Batch convert", f"Scanning {root}")

    def cb(msg: str):
        console.print(f"• {msg}", highlight=False)

    stats = run_batch(root, overwrite=overwrite, progress=cb)
    console.print(
        f"[green]Converted[/]: {stats['converted']}  "
        f"[yellow]Skipped[/]: {stats['skipped']}  "
        f"[red]Errors[/]: {stats['errors']}"
    )
    return EXIT_OK if stats["errors"] == 0 else EXIT_IO

def _run_single(operands: List[str], cfg: dict, assume_yes: bool, show_progress: bool) -> int:
    ops = resolve_operands(operands, default_output=cfg["default_output"])
    section(console, "sdat2img", f"{ops.transfer_list.name} + {ops.new_dat.name} → {ops.output}")

    # whole manifest is validated before the output is touched
    tl = parse_transfer_list(ops.transfer_list)
    console.print(
        f"transfer.list v{tl.version}  ranges={tl.count()}  "
        f"new blocks={tl.new_blocks()}  image={human_size(tl.image_size())}",
        highlight=False,
    )

    if ops.output.exists() and not confirm_overwrite(console, ops.output, assume_yes):
        console.print("[red]Aborting...[/]")
        return EXIT_USAGE

    with open(ops.new_dat, "rb") as fin:
        if show_progress and tl.new_blocks():
            with Progress(
                TextColumn("[bold]Copying[/]"),
                BarColumn(),
                MofNCompleteColumn(),
                TextColumn("blocks"),
                TimeRemainingColumn(),
                console=console,
            ) as prog:
                task = prog.add_task("copy", total=tl.new_blocks())
                stats = build_image(
                    tl, fin, ops.output,
                    progress=lambda done, total: prog.update(task, completed=done),
                )
        else:
            stats = build_image(tl, fin, ops.output)

    console.print(
        f"[green]Done![/] Output image: [bold]{ops.output}[/] "
        f"({human_size(stats.image_size)}, {stats.blocks_copied} blocks copied, "
        f"{stats.ranges_skipped} ranges skipped)"
    )
    return EXIT_OK

def main(argv: Optional[List[str]] = None) -> int:
    try:
        args = parse_args(argv)
    except UsageError as e:
        return _usage(str(e))
    cfg = load_cfg()
    setup_logging(verbose=args.verbose or bool(cfg.get("verbose")))

    try:
        if args.scan:
            if args.operands:
                return _usage("--scan takes no operands")
            return _run_scan(args.scan, args.overwrite)
        if args.overwrite:
            return _usage("--overwrite only applies to --scan; use --yes for a single image")
        return _run_single(
            args.operands,
            cfg,
            assume_yes=args.yes or bool(cfg.get("assume_yes")),
            show_progress=not args.quiet and bool(cfg.get("progress", True)),
        )
    except UsageError as e:
        return _usage(str(e))
    except TransferListFormatError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}", highlight=False)
        return EXIT_FORMAT
    except TruncatedInputError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}", highlight=False)
        return EXIT_TRUNCATED
    except (OSError, Sdat2ImgError) as e:
        console.print(f"[red]Error:[/] {escape(str(e))}", highlight=False)
        return EXIT_IO

if __name__ == "__main__":
    sys.exit(main())
