"""REST API endpoints for the navigation computer."""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from navcomputer.api.routes.websocket import get_engine


router = APIRouter(prefix="/api/nav", tags=["nav"])


class StatusRequest(BaseModel):
    """Nav status change request ("on" / "off")."""
    status: str


class AlignRequest(BaseModel):
    """Align mode change request."""
    mode: str


class VectorRequest(BaseModel):
    """World-frame direction vector."""
    vector: list[float] = Field(..., min_length=3, max_length=3)


class HorizonRequest(BaseModel):
    enabled: bool


class CommandRequest(BaseModel):
    """Text command such as "nav on" or "align natural"."""
    command: str = Field(..., min_length=1)


def _nav_state():
    return {"status": "ok", "nav": get_engine().nav.get_state()}


@router.get("")
async def get_nav_state():
    """Get navigation computer state."""
    return get_engine().nav.get_state()


@router.put("/status")
async def set_status(request: StatusRequest):
    """Switch the navigation computer on or off."""
    try:
        get_engine().set_nav_status(request.status)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _nav_state()


@router.put("/align")
async def set_align_mode(request: AlignRequest):
    """Select the up reference source."""
    try:
        get_engine().set_align_mode(request.mode)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _nav_state()


@router.put("/forward")
async def set_forward_vector(request: VectorRequest):
    """Set the target forward direction."""
    try:
        get_engine().set_forward_vector(request.vector)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _nav_state()


@router.put("/up")
async def set_up_vector(request: VectorRequest):
    """Set the up reference (used in TARGET align mode)."""
    try:
        get_engine().set_up_vector(request.vector)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _nav_state()


@router.put("/horizon")
async def set_align_to_horizon(request: HorizonRequest):
    """Enable or disable leveling against the up reference."""
    engine = get_engine()
    engine.set_align_to_horizon(request.enabled)
    return {"status": "ok", "alignToHorizon": engine.align_to_horizon}


@router.post("/command")
async def run_command(request: CommandRequest):
    """Run a text command."""
    if not get_engine().handle_command(request.command):
        raise HTTPException(status_code=400, detail=f"Unknown command: {request.command}")
    return _nav_state()


@router.post("/thrust-test")
async def start_thrust_test():
    """Start the thruster test sequence."""
    engine = get_engine()
    engine.start_thrust_test()
    return {"status": "ok", "active": engine.thrust_test_active}


@router.delete("/thrust-test")
async def stop_thrust_test():
    """Abort the thruster test sequence."""
    engine = get_engine()
    engine.stop_thrust_test()
    return {"status": "ok", "active": engine.thrust_test_active}


@router.get("/diagnostics")
async def get_diagnostics():
    """Get the latest diagnostic snapshot."""
    return {"text": get_engine().last_diagnostics}
