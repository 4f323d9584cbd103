"""Integration tests for WebSocket telemetry and message handling.

These tests verify that the full telemetry pipeline works correctly,
including JSON serialization of all data types.
"""

import asyncio
import json

from fastapi import WebSocketDisconnect

from navcomputer.api.routes import websocket
from navcomputer.api.routes.websocket import (
    _step_and_get_telemetry,
    handle_message,
    receive_message_loop,
)
from navcomputer.config import Config
from navcomputer.control.nav_computer import AlignMode, NavStatus
from navcomputer.simulation.engine import SimulationEngine


class FakeWebSocket:
    """Collects messages sent by the handlers."""

    def __init__(self):
        self.sent = []

    async def send_json(self, data):
        self.sent.append(data)


class ScriptedWebSocket(FakeWebSocket):
    """Replays queued client messages, then disconnects.

    A queued callable is invoked when its turn comes and its return value
    is delivered as the message.
    """

    def __init__(self, messages):
        super().__init__()
        self.messages = list(messages)

    async def receive_text(self):
        if not self.messages:
            raise WebSocketDisconnect()
        item = self.messages.pop(0)
        return item() if callable(item) else item


def send(engine, message):
    ws = FakeWebSocket()
    data = message if isinstance(message, str) else json.dumps(message)
    asyncio.run(handle_message(data, engine, ws))
    return ws.sent


class TestTelemetryJSONSerialization:
    """Tests for JSON serialization of telemetry data.

    These tests catch numpy types leaking into the telemetry dict.
    """

    def test_telemetry_is_json_serializable(self):
        engine = SimulationEngine(config=Config())
        engine.set_nav_status("on")
        engine.set_align_mode("natural")
        engine.start()

        for _ in range(5):
            engine.step()

        parsed = json.loads(json.dumps(engine.get_telemetry()))

        assert parsed["nav"]["status"] == "ON"
        assert isinstance(parsed["alignmentError"], float)

    def test_step_and_get_telemetry(self):
        engine = SimulationEngine(config=Config())
        engine.start()

        telemetry = _step_and_get_telemetry(engine)

        assert telemetry["type"] == "telemetry"
        assert telemetry["timestamp"] > 0
        json.dumps(telemetry)


class TestMessageHandling:
    """Tests for client messages."""

    def test_command_start(self):
        engine = SimulationEngine(config=Config())

        sent = send(engine, {"type": "command", "command": "START"})

        assert sent[-1]["type"] == "status"
        assert sent[-1]["state"] == "RUNNING"

    def test_nav_message(self):
        engine = SimulationEngine(config=Config())

        sent = send(engine, {
            "type": "nav",
            "status": "on",
            "align": "target",
            "forward": [1.0, 0.0, 0.0],
            "up": [0.0, 1.0, 0.0],
        })

        assert sent[-1]["navStatus"] == "ON"
        assert engine.nav.status == NavStatus.ON
        assert engine.nav.align_mode == AlignMode.TARGET
        assert engine.nav.forward_vector.tolist() == [1.0, 0.0, 0.0]

    def test_nav_text_command(self):
        engine = SimulationEngine(config=Config())

        sent = send(engine, {"type": "nav", "text": "align total"})

        assert sent[-1]["alignMode"] == "TOTAL"

    def test_unknown_text_command(self):
        engine = SimulationEngine(config=Config())

        sent = send(engine, {"type": "nav", "text": "jump now"})

        assert sent[-1]["type"] == "error"

    def test_invalid_align_reports_error(self):
        engine = SimulationEngine(config=Config())

        sent = send(engine, {"type": "nav", "align": "upside"})

        assert sent == [{"type": "error", "message": "Unknown align mode: upside"}]

    def test_invalid_time_warp(self):
        engine = SimulationEngine(config=Config())

        sent = send(engine, {"type": "config", "timeWarp": -2})

        assert sent[-1]["type"] == "error"
        assert engine.time_warp == 1.0

    def test_invalid_json(self):
        engine = SimulationEngine(config=Config())

        assert send(engine, "{not json")[-1]["message"] == "Invalid JSON"

    def test_unknown_type(self):
        engine = SimulationEngine(config=Config())

        assert send(engine, {"type": "warp"})[-1]["type"] == "error"


class TestMalformedMessages:
    """Tests for messages with wrong types or shapes.

    Each must produce an error reply and leave the engine usable.
    """

    def test_non_object_body(self):
        engine = SimulationEngine(config=Config())

        sent = send(engine, [1, 2])

        assert sent == [{"type": "error", "message": "Message must be a JSON object"}]

    def test_numeric_status(self):
        engine = SimulationEngine(config=Config())

        sent = send(engine, {"type": "nav", "status": 5})

        assert sent[-1]["type"] == "error"
        assert engine.nav.status == NavStatus.OFF

    def test_numeric_align_leaves_engine_usable(self):
        engine = SimulationEngine(config=Config())

        sent = send(engine, {"type": "nav", "align": 5})

        assert sent[-1]["type"] == "error"
        assert engine.nav.align_mode == AlignMode.NONE
        json.dumps(engine.get_telemetry())

    def test_string_time_warp(self):
        engine = SimulationEngine(config=Config())

        sent = send(engine, {"type": "config", "timeWarp": "fast"})

        assert sent[-1]["type"] == "error"
        assert engine.time_warp == 1.0

    def test_non_numeric_vector(self):
        engine = SimulationEngine(config=Config())

        sent = send(engine, {"type": "nav", "forward": ["x", 0, 0]})

        assert sent[-1]["type"] == "error"
        assert engine.nav.forward_vector.tolist() == [0.0, 0.0, 0.0]

    def test_non_string_text_command(self):
        engine = SimulationEngine(config=Config())

        sent = send(engine, {"type": "nav", "text": 42})

        assert sent[-1]["type"] == "error"

    def test_receive_loop_survives_bad_message(self):
        websocket.reset_engine()
        ws = ScriptedWebSocket([
            json.dumps({"type": "nav", "status": 5}),
            json.dumps({"type": "nav", "status": "on"}),
        ])

        asyncio.run(receive_message_loop(ws))

        assert [m["type"] for m in ws.sent] == ["error", "status"]
        assert websocket.get_engine().nav.status == NavStatus.ON


class TestConfigReload:
    def test_messages_reach_engine_after_reload(self):
        """After a reload, commands drive the engine that streams telemetry."""
        first = websocket.reset_engine()

        def reload_then_nav_on():
            websocket.reset_engine()
            return json.dumps({"type": "nav", "status": "on"})

        ws = ScriptedWebSocket([
            json.dumps({"type": "nav", "align": "total"}),
            reload_then_nav_on,
        ])

        asyncio.run(receive_message_loop(ws))

        current = websocket.get_engine()
        assert current is not first
        assert current.nav.status == NavStatus.ON
        assert first.nav.status == NavStatus.OFF
        assert first.nav.align_mode == AlignMode.TOTAL
