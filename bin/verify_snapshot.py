"""Check a saved standings snapshot against its own round history.

Load a snapshot file, replay every committed round from reset ranks and
compare the result with the saved ranks. Prints the leaderboard and any
player whose saved rank disagrees with the replay. Exits 1 on mismatch or
on a snapshot that cannot be read.

Usage:
    uv run python bin/verify_snapshot.py data/snapshots/ecpoker/game-state/v1.json
    uv run python bin/verify_snapshot.py snapshot.json --timeline
    uv run python bin/verify_snapshot.py snapshot.json --decks 3
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from shared.logging import setup_logging
from standings.logic.exceptions import SnapshotLoadError
from standings.logic.rank_format import format_rank
from standings.logic.replay import find_replay_mismatches, rank_timeline
from standings.logic.settings import GameSettings
from standings.logic.state import GameState
from standings.persistence.snapshot import decode_snapshot


def _print_leaderboard(state: GameState) -> None:
    print("=" * 60)
    print("STANDINGS")
    print("=" * 60)
    print(f"Game: {state.game_id}")
    print(f"Rounds: {len(state.history)}  Dealer seat: {state.current_dealer_seat}")
    print()
    print(f"{'seat':>4}  {'rank':>8}  {'status':<7}  name")
    for player in sorted(state.players, key=lambda p: (-p.rank, p.seat_no)):
        print(f"{player.seat_no:>4}  {format_rank(player.rank):>8}  {player.status.value:<7}  {player.name}")
    print()


def _print_timeline(state: GameState, settings: GameSettings) -> None:
    names = {p.id: p.name for p in state.players}
    print("Rank timeline:")
    for entry in rank_timeline(state.players, state.history, settings):
        cells = ", ".join(
            f"{names[pid]}={format_rank(rank) if rank is not None else '-'}" for pid, rank in entry.ranks.items()
        )
        print(f"  #{entry.round_number:<3} {cells}")
    print()


def verify_snapshot(path: Path, settings: GameSettings, *, show_timeline: bool) -> int:
    """Return the process exit code for one snapshot file."""
    try:
        state = decode_snapshot(path.read_text(encoding="utf-8"), settings)
    except (OSError, SnapshotLoadError) as exc:
        print(f"Cannot read snapshot {path}: {exc}", file=sys.stderr)
        return 1

    _print_leaderboard(state)
    if show_timeline:
        _print_timeline(state, settings)

    mismatches = find_replay_mismatches(state.players, state.history, settings)
    if not mismatches:
        print("Replay matches saved ranks.")
        return 0

    names = {p.id: p.name for p in state.players}
    print(f"Replay disagrees for {len(mismatches)} player(s):")
    for player_id, (saved, replayed) in mismatches.items():
        print(f"  {names[player_id]}: saved {format_rank(saved)}, replayed {format_rank(replayed)}")
    return 1


def main() -> None:
    parser = argparse.ArgumentParser(description="Verify a standings snapshot by replaying its history")
    parser.add_argument("snapshot", type=Path, help="Path to a snapshot JSON file")
    parser.add_argument("--timeline", action="store_true", help="Print ranks after every round")
    parser.add_argument(
        "--decks",
        type=int,
        default=GameSettings().legacy_deck_count,
        help="Deck count used to migrate point-score rounds (default: %(default)s)",
    )
    args = parser.parse_args()

    setup_logging(level=logging.WARNING)
    sys.exit(verify_snapshot(args.snapshot, GameSettings(legacy_deck_count=args.decks), show_timeline=args.timeline))


if __name__ == "__main__":
    main()
