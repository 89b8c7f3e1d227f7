"""Health check.

"healthy" once startup finished with a catalog and at least one enabled
feed, "degraded" when either is missing, "starting" before that.
"""

from fastapi import APIRouter, Request

from livedex.api.startup_state import get_startup_state
from livedex.config import VERSION

router = APIRouter()


@router.get("/health")
def health_check(request: Request) -> dict:
    state = get_startup_state()

    if not state.is_ready:
        status = "starting"
    elif state.problems:
        status = "degraded"
    else:
        status = "healthy"

    # Live connection state; the startup record only knows enabled flags
    connections = {}
    service = getattr(request.app.state, "live", None)
    if service is not None:
        connections = {kind.value: client.state.value for kind, client in service.clients.items()}

    return {
        "status": status,
        "version": VERSION,
        "startup": state.to_dict(),
        "connections": connections,
    }
