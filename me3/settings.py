"""User configuration, game selection and Steam installation discovery."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any


class Game(Enum):
    """Games that can be launched."""

    ELDEN_RING = "elden-ring"
    NIGHTREIGN = "nightreign"

    def app_id(self) -> int:
        """The game's Steam app id."""
        return _APP_IDS[self]


_APP_IDS = {
    Game.ELDEN_RING: 1245620,
    Game.NIGHTREIGN: 2622380,
}

_GAME_ALIASES = {
    "elden-ring": Game.ELDEN_RING,
    "er": Game.ELDEN_RING,
    "nightreign": Game.NIGHTREIGN,
    "nr": Game.NIGHTREIGN,
    "elden-ring-nightreign": Game.NIGHTREIGN,
}


def parse_game(value: str) -> Game:
    """Parse a game name or one of its short aliases."""
    try:
        return _GAME_ALIASES[value]
    except KeyError:
        choices = ", ".join(game.value for game in Game)
        raise ValueError(f"invalid game {value!r} (possible values: {choices})") from None


_DELIMITERS = frozenset('{}"')
_ESCAPES = {"n": "\n", "t": "\t", "\\": "\\", '"': '"'}


def _vdf_tokens(text: str) -> Iterator[tuple[str, str]]:
    position = 0
    length = len(text)
    while position < length:
        char = text[position]
        if char.isspace():
            position += 1
        elif text.startswith("//", position):
            newline = text.find("\n", position)
            position = length if newline < 0 else newline + 1
        elif char in "{}":
            yield (char, char)
            position += 1
        elif char == '"':
            position += 1
            chars: list[str] = []
            while True:
                if position >= length:
                    raise ValueError("unterminated quoted string in VDF text")
                char = text[position]
                if char == '"':
                    position += 1
                    break
                if char == "\\" and position + 1 < length:
                    following = text[position + 1]
                    chars.append(_ESCAPES.get(following, "\\" + following))
                    position += 2
                    continue
                chars.append(char)
                position += 1
            yield ("string", "".join(chars))
        else:
            start = position
            while (
                position < length
                and not text[position].isspace()
                and text[position] not in _DELIMITERS
            ):
                position += 1
            token = text[start:position]
            # Platform conditionals such as [$WIN32] carry no data.
            if not (token.startswith("[") and token.endswith("]")):
                yield ("string", token)


def parse_vdf(text: str) -> dict[str, Any]:
    """Parse Valve KeyValues text into nested dictionaries of strings."""
    root: dict[str, Any] = {}
    stack = [root]
    key: str | None = None

    for kind, value in _vdf_tokens(text):
        if kind == "string":
            if key is None:
                key = value
            else:
                stack[-1][key] = value
                key = None
        elif kind == "{":
            if key is None:
                raise ValueError("VDF section opened without a key")
            section: dict[str, Any] = {}
            stack[-1][key] = section
            stack.append(section)
            key = None
        else:
            if len(stack) == 1 or key is not None:
                raise ValueError("unexpected '}' in VDF text")
            stack.pop()

    if len(stack) != 1:
        raise ValueError("unclosed section in VDF text")
    if key is not None:
        raise ValueError(f"VDF key {key!r} has no value")
    return root


def _lookup(table: Mapping[str, Any], *keys: str) -> Any:
    """Follow ``keys`` through nested tables, ignoring case; ``None`` if absent."""
    current: Any = table
    for key in keys:
        if not isinstance(current, Mapping):
            return None
        wanted = key.lower()
        current = next(
            (value for name, value in current.items() if name.lower() == wanted), None
        )
    return current


@dataclass(frozen=True)
class SteamApp:
    """An application installed in a Steam library."""

    app_id: int
    name: str | None
    install_dir: str
    library_path: Path

    @property
    def path(self) -> Path:
        """The directory the app is installed in."""
        return self.library_path / "steamapps" / "common" / self.install_dir


def _candidate_steam_dirs() -> Iterator[Path]:
    if sys.platform == "win32":
        try:
            import winreg

            with winreg.OpenKey(winreg.HKEY_CURRENT_USER, r"Software\Valve\Steam") as key:
                steam_path, _ = winreg.QueryValueEx(key, "SteamPath")
            yield Path(steam_path)
        except OSError:
            pass
        program_files = os.environ.get("ProgramFiles(x86)", r"C:\Program Files (x86)")
        yield Path(program_files) / "Steam"
        return

    home = Path.home()
    if sys.platform == "darwin":
        yield home / "Library" / "Application Support" / "Steam"
        return

    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        yield Path(data_home) / "Steam"
    yield home / ".local" / "share" / "Steam"
    yield home / ".steam" / "steam"
    yield home / ".var" / "app" / "com.valvesoftware.Steam" / ".local" / "share" / "Steam"


@dataclass(frozen=True)
class SteamDir:
    """A Steam installation directory."""

    path: Path

    @classmethod
    def from_dir(cls, path: str | os.PathLike[str]) -> SteamDir:
        """Use ``path`` as the Steam installation; it must be a directory."""
        path = Path(path)
        if not path.is_dir():
            raise FileNotFoundError(f"Steam directory not found: {path}")
        return cls(path)

    @classmethod
    def locate(cls) -> SteamDir:
        """Find the Steam installation in its usual places."""
        for candidate in _candidate_steam_dirs():
            if candidate.is_dir():
                return cls(candidate)
        raise FileNotFoundError("unable to locate a Steam installation")

    def _libraries(self) -> list[Path]:
        folders_file = self.path / "steamapps" / "libraryfolders.vdf"
        if not folders_file.is_file():
            return [self.path]

        folders = _lookup(parse_vdf(folders_file.read_text(encoding="utf-8")), "libraryfolders")
        libraries: list[Path] = []
        if isinstance(folders, Mapping):
            for name, entry in folders.items():
                if isinstance(entry, Mapping):
                    location = _lookup(entry, "path")
                elif name.isdigit():
                    location = entry
                else:
                    continue
                if isinstance(location, str):
                    libraries.append(Path(location))
        if self.path not in libraries:
            libraries.insert(0, self.path)
        return libraries

    def find_app(self, app_id: int) -> SteamApp | None:
        """Find an installed app in any of this installation's libraries."""
        for library in self._libraries():
            manifest = library / "steamapps" / f"appmanifest_{app_id}.acf"
            if not manifest.is_file():
                continue
            state = _lookup(parse_vdf(manifest.read_text(encoding="utf-8")), "AppState")
            install_dir = _lookup(state, "installdir")
            if not isinstance(install_dir, str):
                raise ValueError(f"app manifest {manifest} has no install directory")
            name = _lookup(state, "name")
            return SteamApp(
                app_id=app_id,
                name=name if isinstance(name, str) else None,
                install_dir=install_dir,
                library_path=library,
            )
        return None

    def compat_tool_mapping(self) -> dict[int, dict[str, str]]:
        """The compatibility tool configured for each app id, such as a Proton version."""
        config_file = self.path / "config" / "config.vdf"
        data = parse_vdf(config_file.read_text(encoding="utf-8"))
        mapping = _lookup(
            data, "InstallConfigStore", "Software", "Valve", "Steam", "CompatToolMapping"
        )
        if not isinstance(mapping, Mapping):
            return {}
        return {
            int(app_id): {key: value for key, value in tool.items() if isinstance(value, str)}
            for app_id, tool in mapping.items()
            if app_id.isdigit() and isinstance(tool, Mapping)
        }


def no_profile_dir() -> RuntimeError:
    """The error for a missing profile directory, with advice on setting one."""
    return RuntimeError(
        "No profile directory was configured and the default profile directory was "
        "inaccessible.\n\n"
        "To set a profile directory either provide `--profile-dir` on the command line or "
        "set `profile_dir`\nin a me3 configuration file. Use `me3 info` to find out where "
        "me3 searches for your configuration files."
    )


def _to_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise ValueError(f"configuration {key!r} must be a boolean")


def _to_path(value: Any, key: str) -> Path | None:
    if value is None:
        return None
    if isinstance(value, (str, os.PathLike)):
        return Path(value)
    raise ValueError(f"configuration {key!r} must be a path")


@dataclass
class Config:
    """Settings from configuration files, the environment and the command line."""

    crash_reporting: bool = False
    profile_dir: Path | None = None
    steam_dir: Path | None = None
    windows_binaries_dir: Path | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Config:
        """Build from merged configuration sources; ``crash_reporting`` is required."""
        if not isinstance(data, Mapping):
            raise ValueError("configuration must be a table")
        if "crash_reporting" not in data:
            raise ValueError("configuration is missing field 'crash_reporting'")
        return cls(
            crash_reporting=_to_bool(data["crash_reporting"], "crash_reporting"),
            profile_dir=_to_path(data.get("profile_dir"), "profile_dir"),
            steam_dir=_to_path(data.get("steam_dir"), "steam_dir"),
            windows_binaries_dir=_to_path(
                data.get("windows_binaries_dir"), "windows_binaries_dir"
            ),
        )

    def merge(self, other: Config) -> Config:
        """Combine two configurations; values set here take precedence."""
        return Config(
            crash_reporting=self.crash_reporting or other.crash_reporting,
            profile_dir=self.profile_dir if self.profile_dir is not None else other.profile_dir,
            steam_dir=self.steam_dir if self.steam_dir is not None else other.steam_dir,
            windows_binaries_dir=(
                self.windows_binaries_dir
                if self.windows_binaries_dir is not None
                else other.windows_binaries_dir
            ),
        )

    def resolve_steam_dir(self) -> SteamDir:
        """The configured Steam directory, or the one found on this system."""
        if self.steam_dir is not None:
            return SteamDir.from_dir(self.steam_dir)
        return SteamDir.locate()

    def resolve_profile(self, profile_name: str) -> Path:
        """An existing file named ``profile_name``, or ``<name>.me3`` in the profile directory."""
        if os.path.exists(profile_name):
            return Path(profile_name)
        if self.profile_dir is None:
            raise no_profile_dir()
        return self.profile_dir / f"{profile_name}.me3"