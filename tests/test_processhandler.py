import re

import pytest

from steambuddy.events import EventLoop
from steambuddy.processes import NativeProcessHandler
from steambuddy.processhandler import ProcessHandler


class FakeProcesses(NativeProcessHandler):
    def __init__(self, processes):
        self.processes = dict(processes)
        self.closed = []
        self.terminated = []

    def get_pids(self):
        return list(self.processes)

    def get_exec_path(self, pid):
        return self.processes.get(pid, "")

    def close(self, pid):
        self.closed.append(pid)

    def terminate(self, pid):
        self.terminated.append(pid)


STEAM = re.compile(r"[\\/]steam(?:\.exe$|$)", re.IGNORECASE)


@pytest.fixture
def setup():
    native = FakeProcesses({10: "/usr/bin/steam", 11: "/usr/bin/bash", 12: "", 13: "/opt/Steam"})
    loop = EventLoop()
    return native, loop, ProcessHandler(native, loop)


def test_pids_matching_exec_path(setup):
    _, _, handler = setup
    assert handler.get_pids_matching_exec_path(STEAM) == [10, 13]
    assert handler.get_pids_matching_exec_path("bash$") == [11]


def test_get_pids(setup):
    _, _, handler = setup
    assert handler.get_pids() == [10, 11, 12, 13]


def test_start_monitoring_rejects_zero_and_mismatch(setup):
    _, _, handler = setup
    assert handler.start_monitoring(0, STEAM) is False
    assert handler.start_monitoring(11, STEAM) is False
    assert handler.start_monitoring(99, STEAM) is False
    assert handler.is_running() is False


def test_start_monitoring_and_death_detection(setup):
    native, loop, handler = setup
    died = []
    handler.process_died.connect(lambda: died.append(True))
    assert handler.start_monitoring(10, STEAM) is True
    assert handler.is_running() is True

    loop.advance(1000)
    assert died == []
    del native.processes[10]
    assert handler.is_running() is True
    loop.advance(1000)
    assert died == [True]
    assert handler.is_running() is False


def test_is_running_now_detects_death_immediately(setup):
    native, _, handler = setup
    handler.start_monitoring(10, STEAM)
    native.processes[10] = "/usr/bin/other"
    assert handler.is_running_now() is False


def test_close_with_auto_termination(setup):
    native, loop, handler = setup
    handler.start_monitoring(10, STEAM)
    handler.close(500)
    assert native.closed == [10]
    loop.advance(499)
    assert native.terminated == []
    loop.advance(1)
    assert native.terminated == [10]


def test_close_without_timer_never_terminates(setup):
    native, loop, handler = setup
    handler.start_monitoring(10, STEAM)
    handler.close()
    loop.advance(5000)
    assert native.closed == [10]
    assert native.terminated == []


def test_close_when_not_running_does_nothing(setup):
    native, _, handler = setup
    handler.close(100)
    handler.terminate()
    assert native.closed == []
    assert native.terminated == []


def test_stop_monitoring_cancels_kill_timer(setup):
    native, loop, handler = setup
    handler.start_monitoring(10, STEAM)
    handler.close(100)
    handler.stop_monitoring()
    loop.advance(200)
    assert native.terminated == []


def test_close_detached_pid_terminates_survivor(setup):
    native, loop, handler = setup
    handler.close_detached_pid(10, STEAM, 300)
    assert native.closed == [10]
    loop.advance(300)
    assert native.terminated == [10]


def test_close_detached_pid_skips_exited_process(setup):
    native, loop, handler = setup
    handler.close_detached_pid(10, STEAM, 300)
    del native.processes[10]
    loop.advance(300)
    assert native.terminated == []


def test_close_detached_pid_ignores_mismatch(setup):
    native, loop, handler = setup
    handler.close_detached_pid(11, STEAM, 300)
    loop.advance(300)
    assert native.closed == []
    assert native.terminated == []


def test_close_detached_all_matching(setup):
    native, loop, handler = setup
    handler.close_detached(STEAM, 50)
    assert native.closed == [10, 13]
    loop.advance(50)
    assert sorted(native.terminated) == [10, 13]