"""Destination menu entries."""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Mapping, Optional


# Menu slot -> POI name on the venue map
DEFAULT_DESTINATIONS: Dict[int, str] = {
    1: "Main entrance",
    2: "Meeting room 1",
    3: "Meeting room 2",
    4: "Food court",
    5: "Restrooms",
    6: "Information desk",
    7: "Cinema",
    8: "Pharmacy",
    9: "Supermarket",
    10: "Electronics store",
    11: "Elevators",
    12: "Parking lot",
    13: "Emergency exit",
}


@dataclass(frozen=True)
class Destination:
    id: int
    name: str


class DestinationCatalog:
    """Fixed id -> name table behind the destination list."""

    def __init__(self, mapping: Optional[Mapping[int, str]] = None):
        mapping = DEFAULT_DESTINATIONS if mapping is None else mapping
        self._entries: Dict[int, Destination] = {
            int(dest_id): Destination(id=int(dest_id), name=name)
            for dest_id, name in sorted(mapping.items())
        }

    def get(self, destination_id: int) -> Optional[Destination]:
        return self._entries.get(destination_id)

    def __contains__(self, destination_id: object) -> bool:
        return destination_id in self._entries

    def __iter__(self) -> Iterator[Destination]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def ids(self) -> List[int]:
        return list(self._entries)
