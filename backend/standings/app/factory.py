"""Wire a standings controller to local snapshots and the score store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from shared.db import Database, SqliteScoreRepository
from shared.logging import setup_logging
from shared.storage import LocalSnapshotStorage
from standings.app.settings import StandingsAppSettings
from standings.logic.service import StandingsController
from standings.persistence.sink import NullPersistenceSink, RepositoryPersistenceSink
from standings.persistence.snapshot import SnapshotObserver, load_snapshot

if TYPE_CHECKING:
    from standings.logic.observers import PersistenceSink

logger = structlog.get_logger()


@dataclass
class StandingsApp:
    """A ready controller plus the resources it owns."""

    settings: StandingsAppSettings
    controller: StandingsController
    database: Database | None = None

    def close(self) -> None:
        if self.database is not None:
            self.database.close()
            self.database = None


def create_app(settings: StandingsAppSettings | None = None, *, configure_logging: bool = True) -> StandingsApp:
    """
    Build a controller from settings.

    Restores the last saved snapshot when there is one, saves a new snapshot
    after every transition, and mirrors players and scores to SQLite when
    ``database_path`` is set.
    """
    if settings is None:  # pragma: no cover
        settings = StandingsAppSettings()

    if configure_logging:
        setup_logging(log_dir=settings.log_dir)

    game_settings = settings.to_game_settings()
    storage = LocalSnapshotStorage(settings.snapshot_dir)

    database: Database | None = None
    sink: PersistenceSink
    if settings.database_path:
        database = Database(settings.database_path)
        database.connect()
        sink = RepositoryPersistenceSink(SqliteScoreRepository(database))
    else:
        sink = NullPersistenceSink()

    controller = StandingsController(game_settings, sink=sink)
    restored = load_snapshot(storage, game_settings)
    if restored is not None:
        controller.restore(restored)
    controller.add_observer(SnapshotObserver(storage))

    logger.info(
        "standings ready",
        game_id=controller.state.game_id,
        snapshot_dir=settings.snapshot_dir,
        score_store=settings.database_path or "disabled",
    )
    return StandingsApp(settings=settings, controller=controller, database=database)
