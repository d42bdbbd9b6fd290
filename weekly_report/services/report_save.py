import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, Optional, Sequence
from sqlalchemy import delete, insert
from sqlalchemy import exc as sa_exc
from weekly_report.core.errors import InvalidRequest
from weekly_report.database import Database
from weekly_report.models.report import Report
from weekly_report.services.carry_over import new_report_id

logger = logging.getLogger(__name__)

ATOMIC = "atomic"
SEQUENTIAL = "sequential-best-effort"

# Failures that mean the store could not run the transaction at all, as
# opposed to bad data (duplicate ids and the like) that would fail again.
FALLBACK_ERRORS = (sa_exc.OperationalError, sa_exc.NotSupportedError)


class SaveOutcome(str, Enum):
    APPLIED = "applied"
    PARTIAL = "partial"          # old rows deleted, only some new rows inserted
    NOT_APPLIED = "not_applied"  # store unchanged


@dataclass
class SaveResult:
    outcome: SaveOutcome
    strategy: str
    written: int = 0
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.outcome == SaveOutcome.APPLIED


def build_rows(week_start: date, items: Sequence) -> List[dict]:
    week = week_start.isoformat()
    return [
        {
            "id": item.id or new_report_id(),
            "week_start": week,
            "division": item.division or "",
            "project": item.project or "",
            "prev_progress": item.prev_progress or "",
            "curr_progress": item.curr_progress or "",
            "remarks": item.remarks or "",
        }
        for item in items
    ]


async def save_atomic(database: Database, week_start: date, rows: List[dict]) -> SaveResult:
    async with database.session() as session:
        try:
            async with session.begin():
                await session.execute(delete(Report).where(Report.week_start == week_start.isoformat()))
                if rows:
                    await session.execute(insert(Report), rows)
        except sa_exc.SQLAlchemyError as e:
            return SaveResult(SaveOutcome.NOT_APPLIED, ATOMIC, error=e)
    return SaveResult(SaveOutcome.APPLIED, ATOMIC, written=len(rows))


async def save_sequential(database: Database, week_start: date, rows: List[dict]) -> SaveResult:
    """Delete, then insert row by row, committing each step.

    A failure after the delete leaves the week with only the rows written so
    far; the result reports that as PARTIAL.
    """
    written = 0
    async with database.session() as session:
        try:
            await session.execute(delete(Report).where(Report.week_start == week_start.isoformat()))
            await session.commit()
        except sa_exc.SQLAlchemyError as e:
            await session.rollback()
            return SaveResult(SaveOutcome.NOT_APPLIED, SEQUENTIAL, error=e)

        for row in rows:
            try:
                await session.execute(insert(Report).values(**row))
                await session.commit()
            except sa_exc.SQLAlchemyError as e:
                await session.rollback()
                return SaveResult(SaveOutcome.PARTIAL, SEQUENTIAL, written=written, error=e)
            written += 1
    return SaveResult(SaveOutcome.APPLIED, SEQUENTIAL, written=written)


async def save_week(database: Database, week_start: Optional[date], items: Optional[Sequence]) -> SaveResult:
    """Replace every stored row of ``week_start`` with ``items``."""
    if week_start is None:
        raise InvalidRequest("Missing weekStart")
    if items is None or not isinstance(items, (list, tuple)):
        raise InvalidRequest("items must be a list")

    rows = build_rows(week_start, items)

    if database.supports_transactions:
        result = await save_atomic(database, week_start, rows)
        if result.ok or not isinstance(result.error, FALLBACK_ERRORS):
            _log_result(week_start, result)
            return result
        logger.warning("Atomic save of week %s failed (%s); retrying row by row",
                       week_start, result.error)

    result = await save_sequential(database, week_start, rows)
    _log_result(week_start, result)
    return result


def _log_result(week_start: date, result: SaveResult) -> None:
    if result.outcome == SaveOutcome.APPLIED:
        logger.info("Saved %d item(s) for week %s (%s)", result.written, week_start, result.strategy)
    elif result.outcome == SaveOutcome.PARTIAL:
        logger.error("Partial save of week %s: old rows deleted, %d item(s) written before: %s",
                     week_start, result.written, result.error)
    else:
        logger.error("Save of week %s not applied (%s): %s", week_start, result.strategy, result.error)
