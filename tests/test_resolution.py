from steambuddy.events import EventLoop
from steambuddy.resolution import NativeResolutionHandler, Resolution, ResolutionHandler

FHD = Resolution(1920, 1080)
HD = Resolution(1280, 720)
UHD = Resolution(3840, 2160)


class FakeDisplays(NativeResolutionHandler):
    def __init__(self, displays, primary, supported):
        self.current = dict(displays)
        self.primary = primary
        self.supported = set(supported)
        self.failing = False

    def change_resolution(self, predicate):
        changed = {}
        for name, current in self.current.items():
            wanted = predicate(name, name == self.primary)
            if wanted is None:
                continue
            if wanted == current:
                changed[name] = None
                continue
            if self.failing or wanted not in self.supported:
                continue
            self.current[name] = wanted
            changed[name] = current
        return changed


def make(handled=()):
    native = FakeDisplays({"0": FHD, "1": UHD}, "0", {FHD, HD, UHD})
    loop = EventLoop()
    return native, loop, ResolutionHandler(native, loop, handled)


def test_primary_changed_when_no_displays_configured():
    native, _, handler = make()
    assert handler.change_resolution(1280, 720) is True
    assert native.current == {"0": HD, "1": UHD}
    assert handler.original_resolutions == {"0": FHD}


def test_restore_brings_back_original():
    native, _, handler = make()
    handler.change_resolution(1280, 720)
    handler.restore_resolution()
    assert native.current == {"0": FHD, "1": UHD}
    assert handler.original_resolutions == {}


def test_handled_displays_selects_non_primary():
    native, _, handler = make(handled=["1"])
    assert handler.change_resolution(1280, 720) is True
    assert native.current == {"0": FHD, "1": HD}


def test_unsupported_resolution_fails():
    native, _, handler = make()
    assert handler.change_resolution(800, 600) is False
    assert native.current["0"] == FHD
    assert handler.original_resolutions == {}


def test_same_resolution_is_not_remembered():
    _, _, handler = make()
    assert handler.change_resolution(1920, 1080) is True
    assert handler.original_resolutions == {}


def test_first_original_is_kept_across_changes():
    native, _, handler = make()
    handler.change_resolution(1280, 720)
    handler.change_resolution(3840, 2160)
    assert handler.original_resolutions == {"0": FHD}
    handler.restore_resolution()
    assert native.current["0"] == FHD


def test_restore_retries_after_failure():
    native, loop, handler = make()
    handler.change_resolution(1280, 720)
    native.failing = True
    handler.restore_resolution()
    assert native.current["0"] == HD
    native.failing = False
    loop.advance(9999)
    assert native.current["0"] == HD
    loop.advance(1)
    assert native.current["0"] == FHD
    assert handler.original_resolutions == {}


def test_close_restores():
    native, _, handler = make()
    handler.change_resolution(1280, 720)
    handler.close()
    assert native.current["0"] == FHD