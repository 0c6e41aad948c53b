class GeoExplorerError(Exception):
    """Base error for the game core."""


class InvalidTransition(GeoExplorerError):
    """A session operation was requested outside its legal state.

    The state machine itself never raises this; it ignores the call. The API
    layer raises it to tell a client its request had no effect.
    """

    def __init__(self, operation: str, state: str):
        self.operation = operation
        self.state = state
        super().__init__(f"'{operation}' is not allowed while session is {state}")


class DegradedSource(GeoExplorerError):
    """The imagery provider could not supply a target for a round."""


class SessionNotFound(GeoExplorerError):
    """No game session exists for the requesting player."""

    def __init__(self, player_identity: str):
        self.player_identity = player_identity
        super().__init__(f"No active game for player '{player_identity}'")
