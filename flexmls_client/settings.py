"""
Initializes the Dynaconf settings object for the flexmls client.
This module is the single source of truth for all configuration.
"""

from pathlib import Path
from dynaconf import Dynaconf

PROJECT_ROOT = Path(__file__).parent.parent

# Environment variables override files, e.g. FLEXMLS_API__KEY=...
settings = Dynaconf(
    root_path=PROJECT_ROOT,
    settings_files=["config/settings.toml"],
    secrets=["config/.secrets.toml"],
    envvar_prefix="FLEXMLS",
    merge_enabled=True,
)
