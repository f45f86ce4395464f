"""Points of interest owned by the navigation subsystem."""

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple
import logging
import math

logger = logging.getLogger(__name__)

Position = Tuple[float, float, float]


@dataclass(frozen=True)
class PointOfInterest:
    """A named, navigable target on the venue map.

    Attributes:
        poi_id: Identifier assigned by the map
        name: Display name, matched case-insensitively
        position: Map coordinates in meters (x, y, z)
    """

    poi_id: str
    name: str
    position: Position = (0.0, 0.0, 0.0)

    def distance_to(self, position: Position) -> float:
        return math.dist(self.position, position)


PoiSource = Callable[[], Iterable[PointOfInterest]]


class PointOfInterestRegistry:
    """Name lookup over whatever POIs the navigation subsystem has live.

    Nothing is cached: the source is queried on every call because the live
    set appears only after localization and may change afterwards.
    """

    def __init__(self, source: PoiSource):
        self._source = source

    def find_by_name(self, name: str) -> Optional[PointOfInterest]:
        """Case-insensitive exact match, or None."""
        wanted = name.casefold()
        for poi in self._source():
            if poi.name.casefold() == wanted:
                return poi
        logger.debug(f"No live POI named {name!r}")
        return None

    def names(self) -> List[str]:
        return [poi.name for poi in self._source()]

    def __len__(self) -> int:
        return sum(1 for _ in self._source())
