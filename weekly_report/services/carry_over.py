import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from weekly_report.models.report import Report

logger = logging.getLogger(__name__)


@dataclass
class ResolvedWeek:
    items: List[Report] = field(default_factory=list)
    is_draft: bool = False


def new_report_id() -> str:
    return str(uuid.uuid4())


async def get_week_items(db: AsyncSession, week_start: date) -> List[Report]:
    # rows come back in insertion order, which is the order they were saved in
    result = await db.execute(
        select(Report).where(Report.week_start == week_start.isoformat())
    )
    return list(result.scalars().all())


def carry_over_item(previous: Report, week_start: date) -> Report:
    # Last week's "this week" becomes this week's "last week".
    # The object is never added to a session, so it stays unsaved.
    return Report(
        id=new_report_id(),
        week_start=week_start.isoformat(),
        division=previous.division,
        project=previous.project,
        prev_progress=previous.curr_progress,
        curr_progress="",
        remarks=previous.remarks,
    )


async def resolve_week(db: AsyncSession, week_start: date) -> ResolvedWeek:
    """What the editor should show for ``week_start``.

    Saved rows for the week win outright. Failing that, the previous week's
    rows are turned into an unsaved draft. The week is not normalized here:
    callers pass the Monday, and any other date looks up the wrong previous
    week.
    """
    if week_start.weekday() != 0:
        logger.warning("Week start %s is not a Monday; carry-over uses %s",
                       week_start, week_start - timedelta(days=7))

    items = await get_week_items(db, week_start)
    if items:
        return ResolvedWeek(items=items, is_draft=False)

    previous_items = await get_week_items(db, week_start - timedelta(days=7))
    if previous_items:
        drafts = [carry_over_item(item, week_start) for item in previous_items]
        logger.debug("Carried %d item(s) over into %s", len(drafts), week_start)
        return ResolvedWeek(items=drafts, is_draft=True)

    return ResolvedWeek(items=[], is_draft=False)
