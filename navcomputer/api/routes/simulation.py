"""REST API endpoints for simulation control."""

from typing import Optional
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from navcomputer.api.routes.websocket import get_engine


router = APIRouter(prefix="/api/simulation", tags=["simulation"])


class SimulationConfig(BaseModel):
    """Simulation configuration."""
    timeWarp: Optional[float] = Field(None, gt=0, description="Control ticks per step")


@router.get("/state")
async def get_state():
    """Get current simulation state."""
    engine = get_engine()
    return {
        "state": engine.state.name,
        "simTime": engine.sim_time,
        "timeWarp": engine.time_warp,
        "navStatus": engine.nav.status.name,
        "alignMode": engine.nav.align_mode.name,
    }


@router.post("/start")
async def start_simulation():
    """Start the simulation."""
    engine = get_engine()
    engine.start()
    return {"status": "ok", "state": engine.state.name}


@router.post("/stop")
async def stop_simulation():
    """Stop the simulation."""
    engine = get_engine()
    engine.stop()
    return {"status": "ok", "state": engine.state.name}


@router.post("/pause")
async def pause_simulation():
    """Pause the simulation."""
    engine = get_engine()
    engine.pause()
    return {"status": "ok", "state": engine.state.name}


@router.post("/reset")
async def reset_simulation():
    """Reset the simulation to initial state."""
    engine = get_engine()
    engine.reset()
    return {"status": "ok", "state": engine.state.name}


@router.post("/step")
async def step_simulation():
    """Advance a running simulation by one step."""
    engine = get_engine()
    engine.step()
    return {"status": "ok", "simTime": engine.sim_time}


@router.put("/config")
async def update_config(config: SimulationConfig):
    """Update simulation configuration."""
    engine = get_engine()

    if config.timeWarp is not None:
        try:
            engine.set_time_warp(config.timeWarp)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    return {
        "status": "ok",
        "timeWarp": engine.time_warp,
    }


@router.get("/telemetry")
async def get_telemetry():
    """Get current telemetry snapshot."""
    engine = get_engine()
    return engine.get_telemetry()
