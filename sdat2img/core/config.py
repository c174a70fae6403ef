# sdat2img/core/config.py
"""
User defaults for the CLI, stored as a flat JSON object.

Location: $SDAT2IMG_CONFIG if set, else <config home>/sdat2img/config.json
(%APPDATA% on Windows, $XDG_CONFIG_HOME or ~/.config elsewhere).
"""
from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

# key -> (type, default)
SETTINGS: Dict[str, tuple] = {
    "default_output": (str, "system.img"),
    "verbose": (bool, False),
    "assume_yes": (bool, False),
    "progress": (bool, True),
}

DEFAULT_CFG: Dict[str, Any] = {k: default for k, (_, default) in SETTINGS.items()}

def config_path() -> Path:
    env_path = os.environ.get("SDAT2IMG_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    if os.name == "nt":
        home = Path(os.environ.get("APPDATA", Path.home() / "AppData/Roaming"))
    else:
        home = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return home / "sdat2img" / "config.json"

def _validated(raw: Dict[str, Any]) -> Dict[str, Any]:
    cfg = dict(DEFAULT_CFG)
    for key, value in raw.items():
        if key not in SETTINGS:
            logger.debug("Ignoring unknown config key %r", key)
            continue
        typ = SETTINGS[key][0]
        if not isinstance(value, typ):
            logger.warning("Config key %r should be %s, got %r; using default", key, typ.__name__, value)
            continue
        cfg[key] = value
    return cfg

def load_cfg() -> Dict[str, Any]:
    p = config_path()
    if not p.exists():
        return dict(DEFAULT_CFG)
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable config %s: %s", p, e)
        return dict(DEFAULT_CFG)
    if not isinstance(raw, dict):
        logger.warning("Ignoring config %s: expected a JSON object", p)
        return dict(DEFAULT_CFG)
    return _validated(raw)

def save_cfg(cfg: Dict[str, Any]) -> Path:
    p = config_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(_validated(cfg), indent=2), encoding="utf-8")
    return p
