"""The ``me3`` command line: configuration loading and command dispatch."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import platformdirs

from me3 import info as info_command
from me3 import profile_commands
from me3.launch import LaunchArgs, launch
from me3.settings import Config, parse_game

_log = logging.getLogger(__name__)

_VERSION = "0.3.0"
_ENV_PREFIX = "ME3_"


@dataclass
class AppInstallInfo:
    """Where me3 is installed and where its system configuration lives."""

    prefix: Path
    config_path: Path

    @classmethod
    def from_cargo(cls) -> AppInstallInfo:
        """Detect a development checkout from ``CARGO_MANIFEST_DIR``."""
        if "NO_CARGO_DETECTION" in os.environ:
            raise RuntimeError("Cargo detection was disabled via NO_CARGO_DETECTION=")
        workspace = os.environ.get("CARGO_MANIFEST_DIR")
        if workspace is None:
            raise RuntimeError("CARGO_MANIFEST_DIR is not set")
        return cls(prefix=Path(workspace), config_path=Path(workspace))

    def system_config(self) -> Path:
        """Path of the system-wide configuration file."""
        return self.config_path / "me3.toml"


@dataclass
class AppPaths:
    """Configuration search paths and data directories."""

    system_config_path: Path | None = None
    user_config_path: Path | None = None
    cli_config_path: Path | None = None
    logs_path: Path | None = None
    cache_path: Path | None = None


def parse_key_val(text: str) -> tuple[str, str]:
    """Split ``KEY=value`` at the first ``=``."""
    key, sep, value = text.partition("=")
    if not sep:
        raise ValueError(f"invalid KEY=value: no `=` found in `{text}`")
    return key, value


def build_parser() -> argparse.ArgumentParser:
    """The argument parser for the ``me3`` command."""
    parser = argparse.ArgumentParser(prog="me3", description="Mod loader for FromSoftware games.")
    parser.add_argument("--version", action="version", version=f"me3 {_VERSION}")
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Disable tracing logs and diagnostics."
    )
    parser.add_argument("--config-file", type=Path)

    config = parser.add_argument_group("Configuration")
    config.add_argument("--crash-reporting", action="store_true", help="Enable crash reporting.")
    config.add_argument(
        "--profile-dir", type=Path, help="Override the path to the me3 profile directory."
    )
    config.add_argument(
        "--steam-dir",
        type=Path,
        help="Optional path to a Steam installation, auto-detected if not provided.",
    )
    if sys.platform.startswith("linux"):
        config.add_argument(
            "--windows-binaries-dir", type=Path, help="Path to PE binaries used by Proton."
        )

    commands = parser.add_subparsers(dest="command", required=True)

    launch_parser = commands.add_parser(
        "launch", help="Launch the selected game with a collection of mod profiles."
    )
    selector = launch_parser.add_argument_group("Game selection").add_mutually_exclusive_group(
        required=True
    )
    selector.add_argument("--auto-detect", action="store_true")
    selector.add_argument("-e", "--exe", type=Path)
    selector.add_argument("-g", "--game", type=parse_game)
    selector.add_argument("-s", "--steam-id", "--steamid", dest="steam_id", type=int)
    mods = launch_parser.add_argument_group("Mod configuration")
    mods.add_argument("-p", "--profile", dest="profiles", action="append", default=[])
    mods.add_argument("--package", dest="packages", action="append", type=Path, default=[])
    mods.add_argument("-n", "--native", dest="natives", action="append", type=Path, default=[])

    commands.add_parser("info", help="Show information on the me3 installation and search paths.")

    profile_parser = commands.add_parser("profile", help="Manage mod profiles.")
    profile_commands_parser = profile_parser.add_subparsers(
        dest="profile_command", required=True
    )
    create = profile_commands_parser.add_parser(
        "create", help="Create a new profile with the given name."
    )
    create.add_argument("name")
    create.add_argument("-g", "--game", type=parse_game)
    create.add_argument("-f", "--file", action="store_true")
    create.add_argument("--overwrite", action="store_true")
    profile_commands_parser.add_parser("list", help="List all stored profiles.")
    show = profile_commands_parser.add_parser("show", help="Show information on a profile.")
    show.add_argument("name")

    return parser


def _read_config_file(path: Path | None) -> dict[str, Any]:
    if path is None:
        return {}
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError):
        return {}


def _environment_config() -> dict[str, str]:
    return {
        name[len(_ENV_PREFIX):].lower(): value
        for name, value in os.environ.items()
        if name.upper().startswith(_ENV_PREFIX) and len(name) > len(_ENV_PREFIX)
    }


def load_config(
    paths: AppPaths, cli_config: Config, default_profile_dir: Path | None
) -> Config:
    """Merge configuration files and ``ME3_`` variables, then fill gaps from the command line."""
    merged: dict[str, Any] = {}
    if default_profile_dir is not None:
        merged["profile_dir"] = os.fspath(default_profile_dir)
    for source in (paths.system_config_path, paths.user_config_path, paths.cli_config_path):
        merged.update(_read_config_file(source))
    merged.update(_environment_config())

    try:
        loaded = Config.from_dict(merged)
    except ValueError as exc:
        _log.warning("Failed to load configuration: %s", exc)
        loaded = Config()
    return loaded.merge(cli_config)


def bins_dir(config: Config) -> Path:
    """Directory holding the launcher and mod host binaries."""
    if config.windows_binaries_dir is not None:
        return config.windows_binaries_dir
    exe = Path(sys.argv[0]).absolute()
    if exe.is_symlink():
        return Path(os.readlink(exe))
    return exe.parent


def _cli_config(namespace: argparse.Namespace) -> Config:
    return Config(
        crash_reporting=namespace.crash_reporting,
        profile_dir=namespace.profile_dir,
        steam_dir=namespace.steam_dir,
        windows_binaries_dir=getattr(namespace, "windows_binaries_dir", None),
    )


def _run(namespace: argparse.Namespace, install: AppInstallInfo | None, paths: AppPaths,
         config: Config) -> None:
    if namespace.command == "info":
        info_command.info(install, paths, config)
    elif namespace.command == "launch":
        args = LaunchArgs(
            auto_detect=namespace.auto_detect,
            exe=namespace.exe,
            game=namespace.game,
            steam_id=namespace.steam_id,
            profiles=namespace.profiles,
            packages=namespace.packages,
            natives=namespace.natives,
        )
        launch(config, paths, bins_dir(config), args)
    elif namespace.profile_command == "create":
        profile_commands.create(
            config, namespace.name, namespace.game, namespace.file, namespace.overwrite
        )
    elif namespace.profile_command == "list":
        profile_commands.list_profiles(config)
    else:
        profile_commands.show(config, namespace.name)


def main(argv: list[str] | None = None) -> int:
    """Run the ``me3`` command; returns the exit status."""
    namespace = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.ERROR if namespace.quiet else logging.INFO,
        stream=sys.stderr,
        format="%(levelname)s %(message)s",
    )

    try:
        install: AppInstallInfo | None = AppInstallInfo.from_cargo()
    except RuntimeError:
        install = None

    dirs = platformdirs.PlatformDirs("me3", appauthor=False)
    user_config_dir = Path(dirs.user_config_dir)
    paths = AppPaths(
        system_config_path=install.system_config() if install is not None else None,
        user_config_path=user_config_dir / "me3.toml",
        cli_config_path=namespace.config_file,
        logs_path=Path(dirs.user_data_dir) / "logs",
        cache_path=Path(dirs.user_cache_dir),
    )
    config = load_config(paths, _cli_config(namespace), user_config_dir / "profiles")

    try:
        _run(namespace, install, paths, config)
    except Exception as exc:  # every command failure is reported the same way
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())