"""Recoverable page-flow errors.

Each one carries the message shown to the user. The controller catches
them at its boundary and reports them as toasts.
"""


class FlowError(Exception):
    """Base class for user-visible flow errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidDestinationId(FlowError):
    """The menu sent an id that is not in the destination table."""

    def __init__(self, destination_id):
        super().__init__(f"Unknown destination (id {destination_id}).")
        self.destination_id = destination_id


class DestinationUnavailable(FlowError):
    """The destination is mapped but the map has no live POI for it."""

    def __init__(self, name: str):
        super().__init__(f"{name} is not available right now. Please try again shortly.")
        self.name = name


class NoDestinationSelected(FlowError):
    def __init__(self):
        super().__init__("No destination selected. Please choose a destination first.")
