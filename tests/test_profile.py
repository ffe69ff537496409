import json
from pathlib import Path

import pytest

from me3.dependency import Dependent
from me3.native import DelayInitializer
from me3.profile import Game, ModProfile, Supports

BASIC_CONFIG = """\
profileVersion = "v1"

[[supports]]
game = "elden-ring"
since = "1.16"

[[natives]]
path = "mods/example.dll"
initializer = { delay = { ms = 1000 } }

[[packages]]
id = "example-mod"
source = "mod"
load_after = [{ id = "base", optional = true }]
"""


def test_basic_config_toml(tmp_path):
    profile_path = tmp_path / "basic_config.me3.toml"
    profile_path.write_text(BASIC_CONFIG)

    profile = ModProfile.from_file(profile_path)

    assert profile.supports == [Supports(Game.ELDEN_RING, "1.16")]
    assert [n.id for n in profile.natives] == ["example.dll"]
    assert profile.natives[0].initializer == DelayInitializer(1000)
    assert profile.packages[0].id == "example-mod"
    assert profile.packages[0].load_after == [Dependent("base", True)]


@pytest.mark.parametrize("name", ["profile.me3", "profile"])
def test_toml_extensions(tmp_path, name):
    profile_path = tmp_path / name
    profile_path.write_text(BASIC_CONFIG)

    assert ModProfile.from_file(profile_path).packages[0].asset_path() == Path("mod")


def test_json_profile(tmp_path):
    profile_path = tmp_path / "profile.json"
    profile_path.write_text(
        json.dumps({"profileVersion": "v1", "supports": [{"game": "nightrein"}]})
    )

    profile = ModProfile.from_file(profile_path)

    assert profile.supports == [Supports(Game.NIGHTREIGN)]
    assert profile.natives == []


def test_unsupported_extension(tmp_path):
    profile_path = tmp_path / "profile.yaml"
    profile_path.write_text("profileVersion: v1\n")

    with pytest.raises(ValueError, match="yaml is unsupported"):
        ModProfile.from_file(profile_path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ModProfile.from_file(tmp_path / "absent.toml")


def test_missing_version_tag():
    with pytest.raises(ValueError):
        ModProfile.from_dict({"supports": []})


def test_unknown_version_tag():
    with pytest.raises(ValueError):
        ModProfile.from_dict({"profileVersion": "v2"})


def test_unknown_game():
    with pytest.raises(ValueError):
        Supports.from_dict({"game": "dark-souls"})


def test_game_wire_names():
    assert Game("elden-ring") is Game.ELDEN_RING
    assert Game("nightrein") is Game.NIGHTREIGN


def test_default_profile_serializes_with_tag():
    data = ModProfile().to_dict()

    assert data["profileVersion"] == "v1"
    assert data["supports"] == [] and data["natives"] == [] and data["packages"] == []


def test_toml_round_trip(tmp_path):
    source = tmp_path / "basic.toml"
    source.write_text(BASIC_CONFIG)
    profile = ModProfile.from_file(source)

    target = tmp_path / "copy.toml"
    target.write_text(profile.to_toml())

    assert ModProfile.from_file(target) == profile


def test_dict_round_trip():
    profile = ModProfile(supports=[Supports(Game.NIGHTREIGN, None)])

    assert ModProfile.from_dict(profile.to_dict()) == profile