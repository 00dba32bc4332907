"""Pure domain layer: movement kinds, DTOs, clock and catalog contract."""

from stock_kernel.domain.catalog import ArticleCatalog, InMemoryArticleCatalog
from stock_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from stock_kernel.domain.dtos import (
    ArticleRef,
    CountDetailInfo,
    CountEntry,
    CountSessionInfo,
    CountSessionStatus,
    LedgerReconciliation,
    MovementInfo,
    MovementResult,
    OperatorIdentity,
    RecordCountsResult,
    StockBalanceInfo,
)
from stock_kernel.domain.identifiers import (
    parse_article_id,
    parse_category_id,
    parse_uuid,
)
from stock_kernel.domain.movement_kind import (
    MovementKind,
    SignRule,
    is_magnitude_kind,
    parse_movement_kind,
    sign_rule,
    signed_contribution,
)

__all__ = [
    "ArticleCatalog",
    "InMemoryArticleCatalog",
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "ArticleRef",
    "CountDetailInfo",
    "CountEntry",
    "CountSessionInfo",
    "CountSessionStatus",
    "LedgerReconciliation",
    "MovementInfo",
    "MovementResult",
    "OperatorIdentity",
    "RecordCountsResult",
    "StockBalanceInfo",
    "MovementKind",
    "SignRule",
    "is_magnitude_kind",
    "parse_movement_kind",
    "sign_rule",
    "signed_contribution",
    "parse_article_id",
    "parse_category_id",
    "parse_uuid",
]
