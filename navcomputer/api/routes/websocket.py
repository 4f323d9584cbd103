"""WebSocket endpoint for real-time telemetry."""

import asyncio
import json
import logging
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from navcomputer.config import check_config_changed, get_config
from navcomputer.simulation.engine import SimulationEngine


logger = logging.getLogger(__name__)

router = APIRouter()

# Global simulation engine instance
_engine: Optional[SimulationEngine] = None

# Config check interval (seconds)
CONFIG_CHECK_INTERVAL = 1.0


def get_engine() -> SimulationEngine:
    """Get or create simulation engine instance."""
    global _engine
    if _engine is None:
        _engine = SimulationEngine()
    return _engine


def reset_engine() -> SimulationEngine:
    """Reset engine with new config."""
    global _engine
    _engine = SimulationEngine(config=get_config())
    return _engine


class ConnectionManager:
    """Manages WebSocket connections."""

    def __init__(self):
        self.active_connections: list[WebSocket] = []

    async def connect(self, websocket: WebSocket) -> None:
        """Accept a new WebSocket connection."""
        await websocket.accept()
        self.active_connections.append(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        """Remove a WebSocket connection."""
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)


manager = ConnectionManager()


@router.websocket("/ws/telemetry")
async def telemetry_websocket(websocket: WebSocket):
    """WebSocket endpoint for real-time telemetry.

    Sends telemetry data at the configured rate.
    Receives control commands from client.
    """
    await manager.connect(websocket)

    telemetry_interval = 1.0 / get_config().simulation.telemetry_rate

    # Create separate tasks for sending and receiving
    send_task = asyncio.create_task(
        send_telemetry_loop(websocket, telemetry_interval)
    )
    receive_task = asyncio.create_task(
        receive_message_loop(websocket)
    )

    try:
        # Wait for either task to complete (usually due to disconnect)
        done, pending = await asyncio.wait(
            [send_task, receive_task],
            return_when=asyncio.FIRST_COMPLETED,
        )

        # Cancel pending tasks
        for task in pending:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
    finally:
        send_task.cancel()
        receive_task.cancel()
        manager.disconnect(websocket)


def _step_and_get_telemetry(engine: SimulationEngine) -> dict:
    """Step simulation and get telemetry in a single call.

    This runs in thread pool to avoid blocking.
    """
    engine.step()
    telemetry = engine.get_telemetry()
    telemetry["type"] = "telemetry"
    return telemetry


async def send_telemetry_loop(websocket: WebSocket, interval: float) -> None:
    """Background task to send telemetry at regular intervals.

    Runs the simulation step in the thread pool and checks for config
    file changes periodically. A reload replaces the shared engine, so it
    is looked up again on every iteration.
    """
    loop = asyncio.get_running_loop()
    last_config_check = loop.time()

    try:
        while True:
            loop_start = loop.time()

            if loop_start - last_config_check >= CONFIG_CHECK_INTERVAL:
                last_config_check = loop_start
                config_changed = await asyncio.to_thread(check_config_changed)
                if config_changed:
                    # Config changed - reset engine and notify client
                    reset_engine()
                    await websocket.send_json({
                        "type": "config_reload",
                        "message": "Configuration reloaded, simulation reset",
                    })

            telemetry = await asyncio.to_thread(_step_and_get_telemetry, get_engine())
            await websocket.send_json(telemetry)

            # Calculate remaining time to maintain consistent interval
            elapsed = loop.time() - loop_start
            sleep_time = max(0, interval - elapsed)
            if sleep_time > 0:
                await asyncio.sleep(sleep_time)
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"Telemetry loop error: {e}", exc_info=True)


async def receive_message_loop(websocket: WebSocket) -> None:
    """Background task to receive and handle messages.

    Each message goes to the current engine, which may have been replaced
    by a config reload since the connection opened.
    """
    try:
        while True:
            data = await websocket.receive_text()
            await handle_message(data, get_engine(), websocket)
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"Receive loop error: {e}", exc_info=True)


async def handle_message(
    data: str,
    engine: SimulationEngine,
    websocket: WebSocket,
) -> None:
    """Handle incoming WebSocket message.

    Args:
        data: JSON message string
        engine: Simulation engine instance
        websocket: WebSocket connection
    """
    try:
        message = json.loads(data)
        if not isinstance(message, dict):
            await send_error(websocket, "Message must be a JSON object")
            return
        msg_type = message.get("type")

        if msg_type == "command":
            await handle_command(message, engine, websocket)
        elif msg_type == "nav":
            await handle_nav(message, engine, websocket)
        elif msg_type == "config":
            await handle_config(message, engine, websocket)
        else:
            await send_error(websocket, f"Unknown message type: {msg_type}")

    except json.JSONDecodeError:
        await send_error(websocket, "Invalid JSON")
    except (AttributeError, TypeError, ValueError) as e:
        await send_error(websocket, str(e))


async def handle_command(
    message: dict,
    engine: SimulationEngine,
    websocket: WebSocket,
) -> None:
    """Handle control commands (START, STOP, PAUSE, RESET)."""
    command = message.get("command")

    if command == "START":
        engine.start()
    elif command == "STOP":
        engine.stop()
    elif command == "PAUSE":
        engine.pause()
    elif command == "RESET":
        engine.reset()
    else:
        await send_error(websocket, f"Unknown command: {command}")
        return

    await send_status(websocket, engine)


async def handle_nav(
    message: dict,
    engine: SimulationEngine,
    websocket: WebSocket,
) -> None:
    """Handle navigation computer changes.

    Message format (all fields optional):
        {"type": "nav", "status": "on", "align": "natural",
         "forward": [x, y, z], "up": [x, y, z], "text": "nav off"}
    """
    if "status" in message:
        engine.set_nav_status(message["status"])
    if "align" in message:
        engine.set_align_mode(message["align"])
    if "forward" in message:
        engine.set_forward_vector(message["forward"])
    if "up" in message:
        engine.set_up_vector(message["up"])
    if "text" in message and not engine.handle_command(message["text"]):
        await send_error(websocket, f"Unknown command: {message['text']}")
        return

    await send_status(websocket, engine)


async def handle_config(
    message: dict,
    engine: SimulationEngine,
    websocket: WebSocket,
) -> None:
    """Handle configuration changes."""
    if "timeWarp" in message:
        try:
            engine.set_time_warp(message["timeWarp"])
        except ValueError as e:
            await send_error(websocket, str(e))
            return

    await send_status(websocket, engine)


async def send_status(websocket: WebSocket, engine: SimulationEngine) -> None:
    """Send status update to client."""
    status = {
        "type": "status",
        "state": engine.state.name,
        "simTime": engine.sim_time,
        "timeWarp": engine.time_warp,
        "navStatus": engine.nav.status.name,
        "alignMode": engine.nav.align_mode.name,
    }
    await websocket.send_json(status)


async def send_error(websocket: WebSocket, message: str) -> None:
    """Send error message to client."""
    error = {
        "type": "error",
        "message": message,
    }
    await websocket.send_json(error)
