"""The ``launch`` command: start a game with the mod host attached."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
import tempfile
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from me3.attach import AttachConfig
from me3.dependency import sort_dependencies
from me3.native import Native
from me3.package import Package
from me3.profile import Game as ProfileGame
from me3.profile import ModProfile
from me3.settings import Config, Game, SteamDir

_log = logging.getLogger(__name__)

_LAUNCHERS = {
    "ELDEN RING": "Game/eldenring.exe",
    "ELDEN RING NIGHTREIGN": "Game/nightreign.exe",
}

_SNIPER_APP_ID = 1628350
_PROTON_APP_IDS = {
    "proton_experimental": 1493710,
    "proton_hotfix": 2180100,
    "proton_9": 2805730,
}

_SUPPORTED_GAMES = {
    ProfileGame.ELDEN_RING: Game.ELDEN_RING,
    ProfileGame.NIGHTREIGN: Game.NIGHTREIGN,
}

Command = tuple[list[str], dict[str, str]]


@dataclass
class LaunchArgs:
    """What to launch and which mods to load into it."""

    auto_detect: bool = False
    exe: Path | None = None
    game: Game | None = None
    steam_id: int | None = None
    profiles: list[str] = field(default_factory=list)
    packages: list[Path] = field(default_factory=list)
    natives: list[Path] = field(default_factory=list)


def launcher_for(name: str) -> Path | None:
    """The game executable, relative to the install directory, for a Steam app name."""
    path = _LAUNCHERS.get(name)
    return None if path is None else Path(path)


class DirectLauncher:
    """Runs the launcher executable directly."""

    def command(self, launcher: str | os.PathLike[str]) -> Command:
        """Arguments and extra environment for running ``launcher``."""
        return [os.fspath(launcher)], {}


@dataclass
class CompatToolLauncher:
    """Runs the launcher under Proton inside the Steam Linux Runtime."""

    tool: Mapping[str, str]
    steam: SteamDir

    def command(self, launcher: str | os.PathLike[str]) -> Command:
        """Arguments and extra environment for running ``launcher`` through Proton."""
        name = self.tool.get("name")
        if name is None:
            raise ValueError("compat tool must have a name")
        proton_id = _PROTON_APP_IDS.get(name)
        if proton_id is None:
            raise RuntimeError("unrecognised compat tool")

        sniper = self.steam.find_app(_SNIPER_APP_ID)
        if sniper is None:
            raise RuntimeError("unable to find Steam Linux Runtime")
        proton = self.steam.find_app(proton_id)
        if proton is None:
            raise RuntimeError("configured compat tool isn't installed")

        argv = [
            os.fspath(sniper.path / "run"),
            "--batch",
            "--",
            os.fspath(proton.path / "proton"),
            "waitforexitandrun",
            os.fspath(launcher),
        ]
        env = {
            "STEAM_COMPAT_CLIENT_INSTALL_PATH": os.fspath(self.steam.path),
            "STEAM_COMPAT_DATA_PATH": os.fspath(
                self.steam.path / "steamapps" / "compatdata" / "1245620"
            ),
        }
        return argv, env


def _normalize(path: str | os.PathLike[str]) -> Path | None:
    try:
        return Path(path).resolve(strict=True)
    except OSError:
        return None


def collect_mods(
    config: Config, args: LaunchArgs
) -> tuple[list[Native], list[Package], set[Game]]:
    """Gather natives and packages from the arguments and profiles, and the games profiles support.

    Paths given directly that cannot be resolved are skipped.
    """
    packages = [
        Package.from_path(path)
        for path in map(_normalize, args.packages)
        if path is not None
    ]
    natives = [
        Native.from_path(path) for path in map(_normalize, args.natives) if path is not None
    ]
    supported: set[Game] = set()

    for profile_name in args.profiles:
        profile_path = config.resolve_profile(profile_name)
        base = _normalize(profile_path.parent)
        if base is None:
            raise RuntimeError("failed to normalize base directory for mod profile")

        profile = ModProfile.from_file(profile_path)
        for package in profile.packages:
            package.source.make_absolute(base)
        for native in profile.natives:
            native.path.make_absolute(base)

        packages.extend(profile.packages)
        natives.extend(profile.natives)
        supported.update(_SUPPORTED_GAMES[entry.game] for entry in profile.supports)

    return natives, packages, supported


def resolve_app_id(args: LaunchArgs, supported_games: Iterable[Game]) -> int:
    """Steam app id of the game to launch, from the selector or the profiles' games."""
    if args.auto_detect:
        games = set(supported_games)
        if len(games) > 1:
            raise RuntimeError("profile supports more than one game, unable to auto-detect")
        if not games:
            raise RuntimeError("unable to auto-detect appid of game")
        return games.pop().app_id()

    if args.steam_id is not None:
        return args.steam_id
    if args.game is not None:
        return args.game.app_id()
    raise RuntimeError("unable to determine app ID for game")


def write_attach_config(
    directory: str | os.PathLike[str],
    natives: list[Native],
    packages: list[Package],
) -> Path:
    """Write the attach configuration to a new file in ``directory`` and return its path."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    config = AttachConfig(natives=natives, packages=packages)
    with tempfile.NamedTemporaryFile(
        "w", dir=directory, prefix=".tmp", delete=False, encoding="utf-8"
    ) as handle:
        handle.write(config.to_toml())
    return Path(handle.name)


def _follow_log(process: subprocess.Popen[Any], log_path: Path) -> None:
    try:
        with log_path.open(encoding="utf-8", errors="replace") as reader:
            while process.poll() is None:
                line = reader.readline()
                if line:
                    sys.stderr.write(line)
                else:
                    time.sleep(0.05)
    except KeyboardInterrupt:
        pass
    finally:
        if process.poll() is None:
            process.kill()


def launch(config: Config, paths: Any, bins_dir: str | os.PathLike[str], args: LaunchArgs) -> None:
    """Launch the selected game with the mod host, echoing its log until it exits.

    ``paths`` has optional ``cache_path`` and ``logs_path`` attributes.
    """
    natives, packages, supported = collect_mods(config, args)

    app_id = resolve_app_id(args, supported)
    _log.info("resolved app id %s", app_id)

    steam_dir = config.resolve_steam_dir()
    _log.info("found steam dir %s", steam_dir.path)

    app = steam_dir.find_app(app_id)
    if app is None:
        raise RuntimeError("installation for requested game wasn't found")
    if app.name is None:
        raise RuntimeError("app must have a name")
    _log.info("found steam app %r in library", app.name)

    launcher_path = launcher_for(app.name)
    if launcher_path is None:
        raise RuntimeError("unable to determine path to launcher for game")
    launcher = app.path / launcher_path
    _log.info("found steam app launcher %s", launcher)

    ordered_natives = sort_dependencies(natives)
    ordered_packages = sort_dependencies(packages)

    config_dir = paths.cache_path if paths.cache_path is not None else app.path
    attach_config_path = write_attach_config(config_dir, ordered_natives, ordered_packages)
    _log.info("wrote attach config to %s", attach_config_path)

    bins_dir = Path(bins_dir)
    injector_path = bins_dir / "me3-launcher.exe"
    dll_path = bins_dir / "me3_mod_host.dll"

    if sys.platform.startswith("linux"):
        compat_tool = steam_dir.compat_tool_mapping().get(app_id)
        if compat_tool is None:
            raise RuntimeError("unable to find compat tool for game")
        _log.info("found compat tool %r for appid", compat_tool)
        argv, extra_env = CompatToolLauncher(tool=compat_tool, steam=steam_dir).command(
            injector_path
        )
    else:
        argv, extra_env = DirectLauncher().command(injector_path)

    logs_dir = paths.logs_path
    if logs_dir is not None:
        Path(logs_dir).mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        prefix="me3-log-", suffix=".log", dir=os.fspath(logs_dir or "."), delete=False
    ) as handle:
        log_path = Path(handle.name).resolve()

    env = dict(os.environ)
    env.update(extra_env)
    env["ME3_LOG_FILE"] = os.fspath(log_path)
    env["ME3_GAME_EXE"] = os.fspath(launcher)
    env["ME3_HOST_DLL"] = os.fspath(dll_path)
    env["ME3_HOST_CONFIG_PATH"] = os.fspath(attach_config_path)
    env["SteamAppId"] = str(app_id)
    env["SteamGameId"] = str(app_id)
    if config.crash_reporting:
        env["ME3_TELEMETRY"] = "true"

    _log.info("running injector command %r", argv)
    process = subprocess.Popen(argv, env=env)
    _follow_log(process, log_path)