"""
Shared fixtures: a scripted subprocess runner and scan contexts.
"""

from __future__ import annotations

import os
import stat

import pytest

from cli_locator.common import CommandResult
from cli_locator.logging_config import setup_logging
from cli_locator.platforms import PosixPlatform, WindowsPlatform
from cli_locator.scanners import ScanContext


# Name unlikely to exist in any system location of the test host
TARGET = "locator-fake-tool"


class FakeRunner:
    """
    Scripted replacement for run_command.

    Responses are keyed by the full argv tuple. A response may be a
    CommandResult, None (spawn failure), or a callable taking argv.
    Unscripted commands fail to spawn. The environment and extra keyword
    arguments of the latest call per argv are kept in envs and kwargs.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []
        self.envs = {}
        self.kwargs = {}

    def add(self, argv, stdout=b"", returncode=0, stderr=b""):
        if isinstance(stdout, str):
            stdout = stdout.encode("utf-8")
        self.responses[tuple(argv)] = CommandResult(returncode=returncode, stdout=stdout, stderr=stderr)
        return self

    def __call__(self, args, timeout=None, env=None, **kwargs):
        argv = tuple(args)
        self.calls.append(argv)
        self.envs[argv] = env
        self.kwargs[argv] = kwargs
        response = self.responses.get(argv)
        if callable(response):
            return response(argv)
        return response


def make_executable(path, content="#!/bin/sh\necho 'tool 1.0.0'\n"):
    """Create an executable file, including parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep test output free of console logging."""
    setup_logging(quiet=True)
    yield


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def home(tmp_path):
    h = tmp_path / "home"
    h.mkdir()
    return h


@pytest.fixture
def posix_ctx(home, runner):
    """POSIX scan context with an empty fake home and no PATH hits."""
    return ScanContext(
        target=TARGET,
        env={"HOME": str(home), "PATH": "/nonexistent"},
        platform=PosixPlatform(),
        timeout=1,
        runner=runner,
    )


@pytest.fixture
def windows_ctx(runner):
    """Windows scan context; nothing on disk, WSL driven by the fake runner."""
    return ScanContext(
        target=TARGET,
        env={"USERPROFILE": r"C:\Users\nobody-here", "PATH": ""},
        platform=WindowsPlatform(),
        timeout=1,
        runner=runner,
    )
