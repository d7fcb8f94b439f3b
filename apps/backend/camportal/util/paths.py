from __future__ import annotations

import os
import sys
from pathlib import Path


def platform_default_config_path() -> Path:
    home = Path.home()
    if sys.platform.startswith("win"):
        root = Path(os.environ.get("APPDATA", home / "AppData" / "Roaming"))
        return root / "camportal" / "config.json"
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / "camportal" / "config.json"
    return Path(os.environ.get("XDG_CONFIG_HOME", home / ".config")) / "camportal" / "config.json"


def resolve_config_path(cli_config_path: str | None) -> Path:
    if cli_config_path:
        return Path(cli_config_path).expanduser().resolve()
    return platform_default_config_path()
