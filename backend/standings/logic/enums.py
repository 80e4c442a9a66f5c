"""
String enum definitions for standings concepts.
"""

from enum import Enum


class PlayerStatus(str, Enum):
    """Whether a player takes part in the current rounds."""

    ACTIVE = "active"
    FROZEN = "frozen"


class RotationPolicy(str, Enum):
    """How the deal passes to the next seat."""

    NEXT_SEAT = "next_seat"  # next seat number above the current one, gap tolerant
    NEXT_INDEX = "next_index"  # next position in the active list, assumes contiguous seats
