"""Commands that create, list and show mod profiles."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from me3.output import OutputBuilder
from me3.profile import Game as ProfileGame
from me3.profile import ModProfile, Supports
from me3.settings import Config, Game, no_profile_dir

_log = logging.getLogger(__name__)

_PROFILE_GAMES = {
    Game.ELDEN_RING: ProfileGame.ELDEN_RING,
    Game.NIGHTREIGN: ProfileGame.NIGHTREIGN,
}

_GAME_TITLES = {
    ProfileGame.ELDEN_RING: "ELDEN RING",
    ProfileGame.NIGHTREIGN: "ELDEN RING: NIGHTREIGN",
}


def list_profiles(config: Config) -> list[str]:
    """Print and return the names of the entries in the profile directory."""
    if config.profile_dir is None:
        raise no_profile_dir()

    _log.debug("searching in %s for profiles", config.profile_dir)
    if not config.profile_dir.exists():
        _log.debug("profile dir doesn't exist, no profiles")
        return []

    names = sorted(entry.name for entry in os.scandir(config.profile_dir))
    for name in names:
        print(name)
    return names


def create(
    config: Config,
    name: str,
    game: Game | None = None,
    file: bool = False,
    overwrite: bool = False,
) -> Path:
    """Write a new, empty profile and return its path.

    With ``file`` the name is used as a file path rather than a profile name.
    """
    profile_path = Path(name) if file else config.resolve_profile(name)

    if profile_path.exists() and overwrite:
        raise FileExistsError("Profile already exists, use --overwrite to ignore this error")

    profile_path.parent.mkdir(parents=True, exist_ok=True)

    profile = ModProfile()
    if game is not None:
        profile.supports.append(Supports(game=_PROFILE_GAMES[game]))

    profile_path.write_text(profile.to_toml(), encoding="utf-8")
    return profile_path


def show(config: Config, name: str) -> str:
    """Print and return a description of the named profile."""
    profile_path = config.resolve_profile(name)
    if not profile_path.exists():
        raise FileNotFoundError("No profile found with this name")

    profile = ModProfile.from_file(profile_path)
    output = OutputBuilder("Mod Profile")
    output.property("Name", name)
    output.property("Path", profile_path)

    def supports(builder: OutputBuilder) -> None:
        for entry in profile.supports:
            builder.property(_GAME_TITLES[entry.game], "Supported")

    def natives(builder: OutputBuilder) -> None:
        for native in profile.natives:

            def describe(child: OutputBuilder, native=native) -> None:
                child.indent(2)
                child.property("Path", native.path)
                child.property("Optional", str(native.optional).lower())

            builder.section(native.id, describe)

    def packages(builder: OutputBuilder) -> None:
        for package in profile.packages:

            def describe(child: OutputBuilder, package=package) -> None:
                child.indent(2)
                child.property("Path", package.source)

            builder.section(package.id, describe)

    output.section("Supports", supports)
    output.section("Natives", natives)
    output.section("Packages", packages)

    text = output.build()
    print(text)
    return text