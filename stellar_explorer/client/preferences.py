"""
Persisted client preferences: selected network and colour theme.

Stored as a small JSON file. A missing or unreadable file, or unknown values
inside it, fall back to the defaults (mainnet, light).
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path

from stellar_explorer.explorer_logging import get_logger

logger = get_logger(__name__)

NETWORKS = ("mainnet", "testnet")
THEMES = ("light", "dark")

PREFS_ENV = "STELLAR_EXPLORER_PREFS"
DEFAULT_PREFS_PATH = Path("~/.config/stellar-explorer/preferences.json")


@dataclass
class Preferences:
    network: str = "mainnet"
    theme: str = "light"


def preferences_path() -> Path:
    override = os.getenv(PREFS_ENV, "").strip()
    return Path(override).expanduser() if override else DEFAULT_PREFS_PATH.expanduser()


def load_preferences(path: Path | None = None) -> Preferences:
    path = path or preferences_path()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Preferences()
    except (OSError, ValueError) as e:
        logger.warning("preferences_unreadable", path=str(path), error=str(e))
        return Preferences()
    if not isinstance(data, dict):
        return Preferences()
    prefs = Preferences()
    if data.get("network") in NETWORKS:
        prefs.network = data["network"]
    if data.get("theme") in THEMES:
        prefs.theme = data["theme"]
    return prefs


def save_preferences(prefs: Preferences, path: Path | None = None) -> Path:
    path = path or preferences_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(prefs), indent=2), encoding="utf-8")
    logger.debug("preferences_saved", path=str(path), network=prefs.network, theme=prefs.theme)
    return path


def toggle_network(prefs: Preferences) -> Preferences:
    prefs.network = "testnet" if prefs.network == "mainnet" else "mainnet"
    return prefs


def toggle_theme(prefs: Preferences) -> Preferences:
    prefs.theme = "dark" if prefs.theme == "light" else "light"
    return prefs
