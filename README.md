# me3

`me3` manages mod profiles for ELDEN RING and ELDEN RING NIGHTREIGN and
starts the mod launcher for a game installed through Steam. It:

- reads mod profiles written in TOML (`.me3`, `.toml`, or no extension) or
  JSON (`.json`),
- orders native modules (DLLs) and asset packages by their declared
  `load_before` / `load_after` dependencies,
- builds a lookup from virtual archive paths (such as
  `data0:/regulation.bin`) to override files in a package directory,
  including Wwise sound paths,
- finds the game in your Steam libraries, writes an attach configuration
  and runs the launcher executable (through Proton and the Steam Linux
  Runtime on Linux).

## Commands

Show where `me3` looks for its configuration, the profile and logs
directories, and whether an installation and Steam were found:

```
me3 info
```

Create, list and inspect profiles:

```
me3 profile create my-mods --game elden-ring
me3 profile list
me3 profile show my-mods
```

`profile create` accepts `-g/--game` (`elden-ring`/`er`, or
`nightreign`/`nr`/`elden-ring-nightreign`) and `-f/--file` to treat the
name as a file path rather than a profile name. A profile name resolves to
`<name>.me3` in the profile directory, unless a file with that name exists.
Note that with `--overwrite`, creating a profile that already exists fails;
without it, an existing file is replaced.

`profile list` prints the entries of the profile directory in sorted order.
`profile show` prints the games, natives and packages of a profile.

Launch a game with one or more profiles, packages and natives:

```
me3 launch --auto-detect -p my-mods
me3 launch -g nightreign --package ./my-package -n ./my-mod.dll
me3 launch -s 1245620 -p ./profiles/custom.me3
```

Exactly one of `--auto-detect`, `-e/--exe`, `-g/--game` or
`-s/--steam-id` must be given. With `--auto-detect` the game is taken from
the `supports` entries of the given profiles, and it fails if they name
more than one game or none. The game is always looked up in Steam, so
`-e/--exe` on its own ends with "unable to determine app ID for game".
Package and native paths given on the command line that do not exist are
skipped.

`launch` writes the attach configuration into the cache directory, creates
a `me3-log-*.log` file in the logs directory, runs `me3-launcher.exe` from
the binaries directory with `ME3_GAME_EXE`, `ME3_HOST_DLL`
(`me3_mod_host.dll`), `ME3_HOST_CONFIG_PATH`, `ME3_LOG_FILE`, `SteamAppId`
and `SteamGameId` set, and echoes the log to standard error until the
launcher exits or you press Ctrl-C. On Linux the compatibility tool
configured in Steam for the game must be `proton_experimental`,
`proton_hotfix` or `proton_9`.

Global options go before the command: `-q/--quiet`, `--config-file`,
`--crash-reporting`, `--profile-dir`, `--steam-dir`, `--version`, and on
Linux `--windows-binaries-dir`.

## Configuration

Settings are gathered, later ones overriding earlier ones, from: the
default profile directory (`profiles` in your user config directory), the
system configuration file, the user configuration file (`me3.toml` in your
user config directory), the file given with `--config-file`, and
environment variables prefixed with `ME3_` (for example
`ME3_PROFILE_DIR`). Keys are `crash_reporting`, `profile_dir`, `steam_dir`
and `windows_binaries_dir`.

The gathered settings must include `crash_reporting`; if they do not, or a
value is malformed, they are discarded with a warning. Command-line options
then fill in any setting still unset, and crash reporting is on if either
side enables it. Unreadable configuration files are ignored.

The system configuration file is `me3.toml` in the directory named by the
`CARGO_MANIFEST_DIR` environment variable, unless `NO_CARGO_DETECTION` is
set; otherwise there is none.

The launcher binaries are taken from `windows_binaries_dir` when set, and
otherwise from the directory of the running `me3` command.

## Profile format

```toml
profileVersion = "v1"

[[supports]]
game = "elden-ring"

[[natives]]
path = "mods/my-mod.dll"
optional = false
initializer = { delay = { ms = 1000 } }

[[natives]]
path = "mods/other.dll"
initializer = { function = "init" }
load_after = [{ id = "my-mod.dll", optional = true }]

[[packages]]
id = "my-package"
source = "packages/my-package"
load_after = [{ id = "base-package", optional = true }]
```

`game` is `elden-ring` or `nightrein`, with an optional `since` version.
Relative `path` and `source` values are resolved against the directory that
holds the profile when launching. A native's identifier is its file name; a
package's is its `id`.

## Library use

```python
from pathlib import Path

from me3.dependency import sort_dependencies
from me3.mapping import ArchiveOverrideMapping
from me3.profile import ModProfile
from me3.wwise import find_override

profile = ModProfile.from_file(Path("my-mods.me3"))
ordered = sort_dependencies(profile.packages)

mapping = ArchiveOverrideMapping()
mapping.scan_directories(ordered)
mapping.get_override("data0:/regulation.bin")   # Path or None
find_override(mapping, "sd:/init.bnk")          # Path or None
```

`sort_dependencies` raises `MissingDependencyError` when a required
dependency is absent and `CyclicDependencyError` when the dependencies form
a cycle. `me3.attach` holds `AttachConfig`, the configuration handed to the
launcher, and the host message types; `me3.dlstring` checks and decodes
encoding-tagged game strings.

## What this package does not do

It does not contain the launcher executable (`me3-launcher.exe`) or the mod
host DLL (`me3_mod_host.dll`) that `launch` runs; they must already be in
the binaries directory. Nothing here injects into the game, hooks asset
loading, writes crash dumps or sends crash reports: `--crash-reporting`
only sets `ME3_TELEMETRY=true` for the launcher. There is no command to
update `me3` or to add it to `PATH`.