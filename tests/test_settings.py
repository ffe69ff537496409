from pathlib import Path

import pytest

from me3.settings import (
    Config,
    Game,
    SteamDir,
    no_profile_dir,
    parse_game,
    parse_vdf,
)


def test_app_ids():
    assert Game.ELDEN_RING.app_id() == 1245620
    assert Game.NIGHTREIGN.app_id() == 2622380


@pytest.mark.parametrize(
    "name, game",
    [
        ("elden-ring", Game.ELDEN_RING),
        ("er", Game.ELDEN_RING),
        ("nightreign", Game.NIGHTREIGN),
        ("nr", Game.NIGHTREIGN),
        ("elden-ring-nightreign", Game.NIGHTREIGN),
    ],
)
def test_parse_game_names_and_aliases(name, game):
    assert parse_game(name) is game


def test_parse_game_rejects_unknown():
    with pytest.raises(ValueError):
        parse_game("dark-souls")


def test_parse_vdf_nested_with_comments_and_escapes():
    text = '// header\n"root"\n{\n  "key" "a \\"quoted\\" value"\n  "child" { "x" "1" }\n}\n'
    assert parse_vdf(text) == {"root": {"key": 'a "quoted" value', "child": {"x": "1"}}}


def test_parse_vdf_unquoted_tokens_and_conditionals():
    assert parse_vdf("root { key value [$WIN32] }") == {"root": {"key": "value"}}


@pytest.mark.parametrize("text", ['"a" {', "}", '"a" "b', '"lonely"'])
def test_parse_vdf_errors(text):
    with pytest.raises(ValueError):
        parse_vdf(text)


def test_steam_dir_from_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        SteamDir.from_dir(tmp_path / "missing")


def _make_steam(tmp_path):
    steam = tmp_path / "steam"
    library = tmp_path / "library"
    (steam / "steamapps").mkdir(parents=True)
    (library / "steamapps").mkdir(parents=True)
    (steam / "steamapps" / "libraryfolders.vdf").write_text(
        '"libraryfolders"\n{\n'
        f'  "0" {{ "path" "{steam.as_posix()}" }}\n'
        f'  "1" {{ "path" "{library.as_posix()}" }}\n'
        "}\n"
    )
    (library / "steamapps" / "appmanifest_1245620.acf").write_text(
        '"AppState" { "appid" "1245620" "name" "ELDEN RING" "installdir" "ELDEN RING" }'
    )
    return steam, library


def test_find_app_in_secondary_library(tmp_path):
    steam, library = _make_steam(tmp_path)
    app = SteamDir.from_dir(steam).find_app(1245620)
    assert app.name == "ELDEN RING"
    assert app.library_path == library
    assert app.path == library / "steamapps" / "common" / "ELDEN RING"


def test_find_missing_app(tmp_path):
    steam, _ = _make_steam(tmp_path)
    assert SteamDir.from_dir(steam).find_app(2622380) is None


def test_compat_tool_mapping(tmp_path):
    steam, _ = _make_steam(tmp_path)
    (steam / "config").mkdir()
    (steam / "config" / "config.vdf").write_text(
        '"InstallConfigStore" { "Software" { "valve" { "Steam" { "CompatToolMapping" {'
        ' "1245620" { "name" "proton_9" "config" "" "priority" "250" } } } } } }'
    )
    mapping = SteamDir.from_dir(steam).compat_tool_mapping()
    assert list(mapping) == [1245620]
    assert mapping[1245620]["name"] == "proton_9"


def test_merge_prefers_self_and_ors_crash_reporting():
    first = Config(crash_reporting=False, profile_dir=Path("a"))
    second = Config(crash_reporting=True, profile_dir=Path("b"), steam_dir=Path("s"))
    merged = first.merge(second)
    assert merged == Config(crash_reporting=True, profile_dir=Path("a"), steam_dir=Path("s"))


def test_from_dict_coerces_strings():
    config = Config.from_dict({"crash_reporting": "true", "profile_dir": "profiles"})
    assert config.crash_reporting is True
    assert config.profile_dir == Path("profiles")
    assert config.steam_dir is None


def test_from_dict_requires_crash_reporting():
    with pytest.raises(ValueError):
        Config.from_dict({"profile_dir": "profiles"})


def test_resolve_profile_existing_file(tmp_path):
    existing = tmp_path / "mine.toml"
    existing.write_text("")
    assert Config().resolve_profile(str(existing)) == existing


def test_resolve_profile_by_name(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = Config(profile_dir=tmp_path / "profiles")
    assert config.resolve_profile("mymod") == tmp_path / "profiles" / "mymod.me3"


def test_resolve_profile_without_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(RuntimeError) as excinfo:
        Config().resolve_profile("mymod")
    assert str(excinfo.value) == str(no_profile_dir())


def test_resolve_steam_dir_uses_configured_path(tmp_path):
    assert Config(steam_dir=tmp_path).resolve_steam_dir().path == tmp_path