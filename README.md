# steambuddy

Building blocks for a host-side companion that controls Steam on a Linux PC:
follow Steam's registry file and process list, launch and track games, close
Steam, change display resolutions and schedule power state changes.

Everything is event driven. Components talk through `Signal` objects and use
`Timer`s that run on an `EventLoop` whose clock you move yourself, with
`advance` (instantly) or `run_for` (sleeping in real time). That keeps the code
deterministic and easy to test.

## Installation

```
pip install steambuddy
```

Running the tests needs the `test` extra:

```
pip install "steambuddy[test]"
pytest
```

## Modules

- `steambuddy.events`: `Signal` (`connect`, `disconnect`, `emit`),
  `EventLoop` (`call_later`, `cancel`, `advance`, `run_for`, `stop`, `now`)
  and `Timer` (`start`, `stop`, `is_active`, `timeout` signal).
- `steambuddy.vdf`: `RegistryFileParser` reads Steam's `registry.vdf` text
  format (`parse(path)` or `parse_bytes(data)`) into a tree of `Node`s in
  `root`. Values that look like 32-bit integers become `int`s. Malformed input
  raises `VdfParseError`. `format_nodes` renders a tree back as text. Comments
  and macros are not supported.
- `steambuddy.registrywatcher`: `RegistryFileWatcher` polls a registry file,
  re-parses it a second after it changes and emits `registry_changed`; the
  parsed tree is in `data`. A missing file at construction raises
  `FileNotFoundError`.
- `steambuddy.processes`: `NativeProcessHandler` is the abstract process
  interface; `LinuxProcessHandler` implements it on a `/proc` tree, with
  `get_pids`, `get_exec_path`, `get_parent_pid`, `get_cmdline`,
  `get_related_pids`, `get_children_pids`, and `close` / `terminate`, which
  send `SIGTERM` / `SIGKILL` to a process and all its descendants.
- `steambuddy.processhandler`: `ProcessHandler` monitors one process whose
  executable path matches a pattern, emits `process_died` when it is gone, and
  can close it with an optional forced kill after a timeout
  (`close_detached` / `close_detached_pid` do the same for unmonitored
  processes).
- `steambuddy.resolution`: `Resolution`, the abstract `NativeResolutionHandler`,
  and `ResolutionHandler`, which changes the resolution of the primary display
  (or of the named `handled_displays`), remembers the originals and restores
  them with `restore_resolution`, retrying every 10 seconds until it succeeds.
- `steambuddy.pcstate`: `PcState`, the abstract `NativePcStateHandler`, and
  `PcStateHandler`, which schedules shutdown, restart, suspend or hibernation
  after a grace period in seconds and refuses a second request while one is
  pending.
- `steambuddy.autostart`: `AutoStartHandler` writes or removes an XDG
  autostart desktop entry (`desktop_entry` builds its text) and checks whether
  the file on disk matches it.
- `steambuddy.networkinfo`: `get_mac_address` returns the upper-case MAC of the
  running Ethernet or Wi-Fi interface that owns a local IP address, or `""`.
- `steambuddy.processlist`: `SteamProcessListObserver` finds the Steam client
  process and collects the `AppId=` values from the command lines of its
  children and grandchildren, emitting `list_changed` when the set changes.
- `steambuddy.registryobserver`: `TrackedAppData`,
  `SteamRegistryObserverInterface`, `SteamRegistryObserver` (combines the
  registry file and process list into `steam_exec_path`, `steam_pid`,
  `global_app_id` and `tracked_app_is_running` signals), `get_entry` for
  looking up a key path in a node tree, and `create_steam_registry_observer`,
  which wires one up for `~/.steam/registry.vdf` and `/usr/bin/steam` unless
  overrides are given.
- `steambuddy.steam`: `SteamHandler` launches apps (optionally in Big
  Picture), reports the running, tracked-active and tracked-updating app,
  closes Steam with an optional forced kill after a grace period, and emits
  `process_state_changed` when Steam starts or stops.

## Example: reading the Steam registry

```python
from steambuddy.vdf import RegistryFileParser, format_nodes
from steambuddy.registryobserver import PID_PATH, get_entry

parser = RegistryFileParser()
parser.parse_bytes(b'"Registry" { "HKLM" { "Software" { "Valve" { "Steam" { "SteamPID" "1234" } } } } }')

print(get_entry(PID_PATH, parser.root))   # 1234
print(format_nodes(parser.root))
```

## Example: timers on the event loop

```python
from steambuddy.events import EventLoop, Timer

loop = EventLoop()
timer = Timer(loop, interval_ms=1000, single_shot=True)
timer.timeout.connect(lambda: print("fired"))
timer.start()
loop.advance(1000)                        # prints "fired"
```

## What this package does not do

- It has no command-line program, HTTP server, client pairing or tray icon;
  it is a library of components to build such a service from.
- `NativePcStateHandler` and `NativeResolutionHandler` are abstract: the
  package does not talk to logind, D-Bus, X11 or Wayland itself. You supply
  implementations.
- `SteamHandler` does not start programs on its own; it calls the `launcher`
  callable you pass in with the program and its arguments.
- There is no tracking of streaming sessions and no sleep inhibition.