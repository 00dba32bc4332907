"""
Module: stock_kernel.runtime
Responsibility: Composition root.  Owns the engine and session factory for a
    process and hands out units of work with every service and selector
    wired to one session.
Architecture position: Outermost kernel layer.  The only place that turns
    settings into an engine; nothing below it holds global database state.

Usage:
    with StockKernelRuntime.from_settings(load_settings(), catalog) as runtime:
        runtime.create_tables()
        with runtime.unit_of_work() as uow:
            uow.ledger.record_movement(7, "compra", Decimal("10"), usuario="ana")
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from stock_config.schema import StockKernelSettings
from stock_kernel.db.engine import (
    build_session_factory,
    create_engine_from_url,
    create_tables,
    session_scope,
)
from stock_kernel.domain.catalog import ArticleCatalog, InMemoryArticleCatalog
from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.logging_config import configure_logging, get_logger
from stock_kernel.selectors.count_session_selector import CountSessionSelector
from stock_kernel.selectors.movement_selector import MovementSelector
from stock_kernel.selectors.stock_selector import StockSelector
from stock_kernel.services.count_session_service import CountSessionService
from stock_kernel.services.movement_ledger import MovementLedger
from stock_kernel.services.stock_aggregate_store import StockAggregateStore

logger = get_logger("runtime")


@dataclass(frozen=True)
class KernelServices:
    """Services and selectors bound to one session."""

    session: Session
    store: StockAggregateStore
    ledger: MovementLedger
    counts: CountSessionService
    movements: MovementSelector
    stock: StockSelector
    sessions: CountSessionSelector


def build_services(
    session: Session,
    catalog: ArticleCatalog,
    clock: Clock | None = None,
) -> KernelServices:
    """Wire every service and selector to ``session``."""
    clock = clock or SystemClock()
    store = StockAggregateStore(session)
    return KernelServices(
        session=session,
        store=store,
        ledger=MovementLedger(session, clock=clock, store=store),
        counts=CountSessionService(session, catalog, clock=clock, store=store),
        movements=MovementSelector(session),
        stock=StockSelector(session),
        sessions=CountSessionSelector(session),
    )


class StockKernelRuntime:
    """Engine, session factory, catalog and clock for one process."""

    def __init__(
        self,
        engine: Engine,
        catalog: ArticleCatalog | None = None,
        clock: Clock | None = None,
    ):
        self.engine = engine
        self.session_factory: sessionmaker[Session] = build_session_factory(engine)
        self.catalog = catalog if catalog is not None else InMemoryArticleCatalog()
        self.clock = clock or SystemClock()

    @classmethod
    def from_settings(
        cls,
        settings: StockKernelSettings,
        catalog: ArticleCatalog | None = None,
        clock: Clock | None = None,
    ) -> "StockKernelRuntime":
        """Configure logging and build the engine described by ``settings``."""
        configure_logging(level=settings.logging.level)
        db = settings.database
        engine = create_engine_from_url(
            db.url,
            echo=db.echo,
            pool_size=db.pool_size,
            max_overflow=db.max_overflow,
            pool_pre_ping=db.pool_pre_ping,
            pool_timeout=db.pool_timeout,
            pool_recycle=db.pool_recycle,
        )
        return cls(engine, catalog=catalog, clock=clock)

    def create_tables(self) -> None:
        create_tables(self.engine)

    @contextmanager
    def unit_of_work(self) -> Iterator[KernelServices]:
        """One session and transaction; commit on success, rollback on error."""
        with session_scope(self.session_factory) as session:
            yield build_services(session, self.catalog, self.clock)

    def close(self) -> None:
        self.engine.dispose()
        logger.info("runtime_closed")

    def __enter__(self) -> "StockKernelRuntime":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
