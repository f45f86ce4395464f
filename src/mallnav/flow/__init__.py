"""Page flow: destination table, flow errors and the controller."""

from .destinations import DEFAULT_DESTINATIONS, Destination, DestinationCatalog
from .errors import (
    DestinationUnavailable,
    FlowError,
    InvalidDestinationId,
    NoDestinationSelected,
)
from .controller import FlowContext, PageFlowController

__all__ = [
    "DEFAULT_DESTINATIONS",
    "Destination",
    "DestinationCatalog",
    "DestinationUnavailable",
    "FlowError",
    "InvalidDestinationId",
    "NoDestinationSelected",
    "FlowContext",
    "PageFlowController",
]
