"""Shared fixtures: app factories wired to fake or stub conversion engines.

Stub engines are tiny Python scripts run with the current interpreter, so the
real subprocess path is exercised without needing pandoc installed.
"""

from __future__ import annotations

import sys

import pytest
from fastapi.testclient import TestClient

from pandoc_renderer.config import Settings
from pandoc_renderer.conversion import ConversionRequest
from pandoc_renderer.webapi import create_app

ECHO_STDIN = "import sys; sys.stdout.buffer.write(sys.stdin.buffer.read())"
PRINT_ARGV = "import json, sys; sys.stdin.read(); print(json.dumps(sys.argv[1:]))"
BOOM = "import sys; sys.stdin.read(); sys.stderr.write('  boom\\n'); sys.exit(1)"
SILENT_EXIT_3 = "import sys; sys.exit(3)"
NEVER_EXITS = "import time; time.sleep(30)"
BINARY_OUTPUT = "import sys; sys.stdin.read(); sys.stdout.buffer.write(bytes(range(256)))"
# Keep writing until killed.
FLOOD_STDOUT = "import sys, time\nwhile True:\n    sys.stdout.buffer.write(b'x' * 65536); sys.stdout.flush(); time.sleep(0.001)"
FLOOD_STDERR = "import sys, time\nwhile True:\n    sys.stderr.buffer.write(b'x' * 65536); sys.stderr.flush(); time.sleep(0.001)"
# Fills the stderr pipe before touching stdin, then writes twice its input.
CHATTY = (
    "import sys; sys.stderr.write('x' * 1000000); sys.stderr.flush(); "
    "data = sys.stdin.buffer.read(); sys.stdout.buffer.write(data * 2)"
)


def stub_command(script: str) -> tuple[str, ...]:
    return (sys.executable, "-c", script)


class RecordingConverter:
    """In-memory converter that records every request it receives."""

    def __init__(self, output: bytes = b"<h1>ok</h1>") -> None:
        self.output = output
        self.calls: list[ConversionRequest] = []

    async def convert(self, request: ConversionRequest) -> bytes:
        self.calls.append(request)
        return self.output


@pytest.fixture
def make_client():
    """Build a TestClient for a stub engine script and optional Settings overrides."""

    def _make(script: str | None = None, **overrides) -> TestClient:
        if script is not None:
            overrides.setdefault("pandoc_command", stub_command(script))
        return TestClient(create_app(Settings(**overrides)))

    return _make


@pytest.fixture
def recording_converter() -> RecordingConverter:
    return RecordingConverter()


@pytest.fixture
def fake_client(recording_converter: RecordingConverter) -> TestClient:
    return TestClient(create_app(Settings(), converter=recording_converter))
