"""
Card-face labels for numeric ranks.

Ranks 2..10 read as numerals, 11..14 as J/Q/K/A and 15 as the joker (王).
Past the joker the faces repeat in rounds: 16 is "R2-2", 29 is "R2-王",
30 is "R3-2". Below 2 the label counts down from two: 1 is "2-1".
"""

LOWEST_FACE_RANK = 2
JOKER_RANK = 15
JOKER_FACE = "王"

CARD_FACES: tuple[str, ...] = ("2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K", "A", JOKER_FACE)

_COURT_FACES = {11: "J", 12: "Q", 13: "K", 14: "A", JOKER_RANK: JOKER_FACE}

# First lap past the joker is labelled R2.
_FIRST_OVERFLOW_GROUP = 2


def format_rank(rank: int) -> str:
    """Return the display label for a rank. Total over all integers."""
    if rank < LOWEST_FACE_RANK:
        return f"2-{LOWEST_FACE_RANK - rank}"
    if rank <= 10:  # noqa: PLR2004
        return str(rank)
    if rank <= JOKER_RANK:
        return _COURT_FACES[rank]

    offset = rank - JOKER_RANK - 1
    group = _FIRST_OVERFLOW_GROUP + offset // len(CARD_FACES)
    face = CARD_FACES[offset % len(CARD_FACES)]
    return f"R{group}-{face}"
