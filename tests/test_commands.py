import subprocess

import pytest
from conftest import FakeRunner

from remoteaccessd import commands
from remoteaccessd.commands import CommandRunner
from remoteaccessd.sounds import Sounds


def completed(returncode, stdout="", stderr=""):
    return subprocess.CompletedProcess([], returncode, stdout, stderr)


class FakeSubprocess:
    def __init__(self):
        self.calls = []
        self.result = lambda cmd: completed(0, "out\n")

    def run(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        return self.result(cmd)


@pytest.fixture
def fake(monkeypatch):
    fake = FakeSubprocess()
    monkeypatch.setattr(commands.subprocess, "run", fake.run)
    return fake


def test_run_capture_success(fake):
    assert CommandRunner(timeout=7).run_capture(["iwconfig"]) == (True, "out\n")
    cmd, kwargs = fake.calls[0]
    assert cmd == ["iwconfig"]
    assert kwargs == {"timeout": 7, "capture_output": True, "text": True}


def test_nonzero_exit_is_failure(fake):
    fake.result = lambda cmd: completed(1, "partial", "boom")
    assert CommandRunner().run_capture(["grep", "x"]) == (False, "partial")
    assert CommandRunner().run(["grep", "x"]) is False


def test_timeout_is_failure(fake):
    def timeout(cmd):
        raise subprocess.TimeoutExpired(cmd, 1)

    fake.result = timeout
    assert CommandRunner().run(["wpa_cli", "scan"]) is False


def test_missing_executable_is_failure(fake):
    def missing(cmd):
        raise FileNotFoundError(2, "No such file", cmd[0])

    fake.result = missing
    assert CommandRunner().run_capture(["iwconfig"]) == (False, "")


def test_reboot(fake):
    assert CommandRunner().reboot()
    assert fake.calls[0][0] == ["reboot"]


def test_sounds_disabled():
    runner = FakeRunner()
    Sounds(runner, enabled=False).play("wifi_on")
    assert runner.commands == []


def test_sound_file_path():
    runner = FakeRunner(failing=[("aplay", "-q", "/snd/failed.wav")])
    Sounds(runner, enabled=True, data_path="/snd").play("failed")
    assert runner.commands == [["aplay", "-q", "/snd/failed.wav"]]
