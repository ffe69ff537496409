"""The ``info`` command: where me3 looks for configuration and what it found."""

from __future__ import annotations

import os
from typing import Any

from me3.output import OutputBuilder
from me3.settings import Config

_RED = "\x1b[31m"
_GREEN = "\x1b[32m"
_RESET = "\x1b[39m"


def format_path(path: str | os.PathLike[str] | None) -> str:
    """Show a path, or a red placeholder when there is none."""
    if path is None:
        return f"{_RED}<none>{_RESET}"
    return os.fspath(path)


def format_status(status: bool) -> str:
    """Show a green ``Found`` or a red ``Not found``."""
    return f"{_GREEN}Found{_RESET}" if status else f"{_RED}Not found{_RESET}"


def render_info(install: Any, paths: Any, config: Config) -> str:
    """Render the report.

    ``install`` has ``config_path`` and ``prefix`` or is ``None``; ``paths`` has
    ``logs_path``, ``system_config_path``, ``user_config_path`` and ``cli_config_path``.
    """
    output = OutputBuilder("Configuration")
    output.property("Profile directory", format_path(config.profile_dir))
    output.property("Logs directory", format_path(paths.logs_path))

    def search_paths(builder: OutputBuilder) -> None:
        builder.property("System configuration", format_path(paths.system_config_path))
        builder.property("User configuration", format_path(paths.user_config_path))
        builder.property("CLI configuration", format_path(paths.cli_config_path))

    def installation(builder: OutputBuilder) -> None:
        builder.property("Status", format_status(install is not None))
        if install is not None:
            builder.property("Config directory", os.fspath(install.config_path))
            builder.property("Installation prefix", os.fspath(install.prefix))

    try:
        steam = config.resolve_steam_dir()
    except OSError:
        steam = None

    def steam_section(builder: OutputBuilder) -> None:
        builder.property("Status", format_status(steam is not None))
        if steam is not None:
            builder.property("Path", os.fspath(steam.path))

    output.section("Search paths", search_paths)
    output.section("Installation", installation)
    output.section("Steam", steam_section)
    return output.build()


def info(install: Any, paths: Any, config: Config) -> None:
    """Print the installation and search path report."""
    print(render_info(install, paths, config), end="")