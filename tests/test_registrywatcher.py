import pytest

from steambuddy.events import EventLoop
from steambuddy.registrywatcher import RegistryFileWatcher
from steambuddy.vdf import Node


@pytest.fixture
def loop():
    return EventLoop()


def make_watcher(tmp_path, loop, content):
    path = tmp_path / "registry.vdf"
    path.write_text(content)
    watcher = RegistryFileWatcher(path, loop)
    events = []
    watcher.registry_changed.connect(lambda: events.append(loop.now))
    return path, watcher, events


def test_missing_file_raises(tmp_path, loop):
    with pytest.raises(FileNotFoundError):
        RegistryFileWatcher(tmp_path / "nope.vdf", loop)


def test_initial_parse_after_delay(tmp_path, loop):
    _, watcher, events = make_watcher(tmp_path, loop, '"Registry" { "SteamPID" "77" }')
    loop.advance(999)
    assert events == []
    loop.advance(1)
    assert len(events) == 1
    assert watcher.data == [Node("Registry", [Node("SteamPID", 77)])]


def test_change_triggers_reparse(tmp_path, loop):
    path, watcher, events = make_watcher(tmp_path, loop, '"a" "1"')
    loop.advance(1000)
    path.write_text('"a" "1" "b" "two"')
    watcher.poll()
    loop.advance(1000)
    assert len(events) == 2
    assert watcher.data == [Node("a", 1), Node("b", "two")]


def test_unchanged_file_is_not_reparsed(tmp_path, loop):
    _, watcher, events = make_watcher(tmp_path, loop, '"a" "1"')
    loop.advance(5000)
    watcher.poll()
    loop.advance(5000)
    assert len(events) == 1


def test_invalid_content_still_emits(tmp_path, loop):
    _, watcher, events = make_watcher(tmp_path, loop, "{")
    loop.advance(1000)
    assert len(events) == 1
    assert watcher.data == []


def test_recovers_after_file_removed(tmp_path, loop):
    path, watcher, events = make_watcher(tmp_path, loop, '"a" "1"')
    loop.advance(1000)
    path.unlink()
    watcher.poll()
    loop.advance(3000)
    assert len(events) == 1
    path.write_text('"b" "2"')
    loop.advance(2000)
    assert len(events) == 2
    assert watcher.data == [Node("b", 2)]