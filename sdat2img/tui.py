#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shared console helpers (header panel, prompts) for the sdat2img CLI.
"""
from __future__ import annotations
import platform
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm

def get_system_label() -> str:
    """Return a formatted system status string."""
    os_name = platform.system()
    if os_name == "Darwin":
        os_name = "macOS"
    return f"[dim]Running on {os_name} {platform.release()} (Python {platform.python_version()})[/]"

def section(console: Console, title: str, subtitle: str = "") -> None:
    msg = f"[bold]{title}[/]"
    if subtitle:
        msg += f"\n[dim]{subtitle}[/]"
    msg += f"\n{get_system_label()}"
    console.print(Panel.fit(msg, border_style="magenta"))

def confirm_overwrite(console: Console, path: Path, assume_yes: bool = False) -> bool:
    """Ask before clobbering an existing image. assume_yes skips the prompt."""
    console.print(f"[yellow]The output file [bold]{path}[/] already exists.[/]")
    if assume_yes:
        console.print("[dim]--yes given, overwriting.[/]")
        return True
    return Confirm.ask("Do you want to overwrite it?", default=False, console=console)
