"""Root procedure router.

health, videos.*, channels.*
"""

from __future__ import annotations

from tubedesk.core.timestamps import iso_timestamp
from tubedesk.models.types import HealthStatus
from tubedesk.rpc.router import ProcedureContext, ProcedureRouter


def build_app_router() -> ProcedureRouter:
    """Assemble every procedure the server exposes."""
    from tubedesk.api.procedures import channels, videos

    root = ProcedureRouter()

    @root.query("health")
    def health(ctx: ProcedureContext) -> HealthStatus:
        """Report liveness with the current time."""
        return HealthStatus(timestamp=iso_timestamp())

    root.include("videos", videos.router)
    root.include("channels", channels.router)
    return root
