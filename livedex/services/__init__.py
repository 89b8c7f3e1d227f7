"""Service layer.

This layer provides clean APIs for the live engine, hiding the consumer
and feed layers from the API layer.

Layer hierarchy:
    API → Services → Consumers / Feeds → Providers
"""

from livedex.services.descriptions import (
    Description,
    DescriptionService,
    create_description_service,
)
from livedex.services.live_context import (
    LiveBattleView,
    LiveContextService,
    LiveRouteView,
    create_live_context_service,
)

__all__ = [
    # Live context
    "LiveBattleView",
    "LiveContextService",
    "LiveRouteView",
    "create_live_context_service",
    # Descriptions
    "Description",
    "DescriptionService",
    "create_description_service",
]
