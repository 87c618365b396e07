"""Test configuration and fixtures for the relay tests."""
import asyncio
import json
from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

from pong_relay.app import create_app
from pong_relay.audit import AuditLog
from pong_relay.config import Settings
from pong_relay.relay import Relay


class FakeSocket:
    """In-memory stand-in for a FastAPI WebSocket."""

    def __init__(self, fail_sends: bool = False):
        self.sent: List[str] = []
        self.closed = False
        self.close_code = None
        self.fail_sends = fail_sends

    async def send_text(self, text: str) -> None:
        if self.closed or self.fail_sends:
            raise RuntimeError('Cannot call "send" once a close message has been sent.')
        self.sent.append(text)

    async def close(self, code: int = 1000) -> None:
        self.closed = True
        self.close_code = code

    @property
    def messages(self) -> List[Any]:
        return [json.loads(text) for text in self.sent]

    def of_type(self, msg_type: str) -> List[Dict[str, Any]]:
        return [m for m in self.messages if isinstance(m, dict) and m.get("type") == msg_type]

    def clear(self) -> None:
        self.sent.clear()


class HangingCloseSocket(FakeSocket):
    """Socket whose close handshake only completes once ``release`` is set."""

    def __init__(self):
        super().__init__()
        self.close_started = asyncio.Event()
        self.release = asyncio.Event()

    async def close(self, code: int = 1000) -> None:
        self.close_started.set()
        await self.release.wait()
        await super().close(code=code)


class GatedSendSocket(FakeSocket):
    """Socket whose sends wait on ``gate`` once one is installed."""

    def __init__(self):
        super().__init__()
        self.gate = None

    async def send_text(self, text: str) -> None:
        if self.gate is not None:
            await self.gate.wait()
        await super().send_text(text)


async def instant_sleep(_: float) -> None:
    await asyncio.sleep(0)


@pytest.fixture
def relay():
    return Relay(audit=AuditLog(50), default_room="baden")


@pytest.fixture
def make_socket():
    def _make(**kwargs) -> FakeSocket:
        return FakeSocket(**kwargs)
    return _make


@pytest.fixture
def test_settings():
    """Settings isolated from the process environment."""
    return Settings(port=5349, default_room="baden", max_logs=100)


@pytest.fixture
def app(test_settings):
    return create_app(test_settings)


@pytest.fixture
def client(app):
    # Entering the client shares one event loop across every websocket session.
    with TestClient(app) as test_client:
        yield test_client
