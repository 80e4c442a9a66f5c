"""Typed domain exceptions for standings bookkeeping.

Pure engine functions never raise. These exceptions are raised at the
boundary where rounds and rosters are built from caller input, and
where persisted snapshots are read back.
"""


class StandingsError(Exception):
    """Base exception for rejected standings operations."""


class UnknownPlayerError(StandingsError):
    """Referenced player id is not on the roster."""

    def __init__(self, player_id: str) -> None:
        self.player_id = player_id
        super().__init__(f"unknown player: {player_id}")


class InvalidRoundError(StandingsError):
    """Round outcome cannot be recorded (missing first caller, oversized house, etc.)."""


class UnsupportedSettingsError(StandingsError):
    """Game settings contain values the engine cannot honour."""


class SnapshotLoadError(Exception):
    """Raised when a saved game snapshot cannot be loaded or parsed."""
