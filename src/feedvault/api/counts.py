"""消息计数 API."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from feedvault.core.counters import MessageCounter, MessageCounts
from feedvault.models.database import get_session

router = APIRouter(prefix="/api/accounts/{account_id}", tags=["counts"])


def _to_response(result: MessageCounts) -> dict:
    if not result.ok:
        raise HTTPException(status_code=503, detail="计数查询失败")

    return {
        "unread": result.unread,
        "total": result.total,
        "feeds": {
            str(feed_id): {"unread": unread, "total": total}
            for feed_id, (unread, total) in result.counts.items()
        },
    }


@router.get("/counts")
async def account_counts(
    account_id: int,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """账户计数."""
    return _to_response(await MessageCounter(session).counts_for_account(account_id))


@router.get("/counts/bin")
async def bin_counts(
    account_id: int,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """回收站计数."""
    return _to_response(await MessageCounter(session).counts_for_bin(account_id))


@router.get("/feeds/{feed_id}/counts")
async def feed_counts(
    account_id: int,
    feed_id: int,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """Feed 计数."""
    counter = MessageCounter(session)
    return _to_response(await counter.counts_for_feed(feed_id, account_id))


@router.get("/categories/{category_id}/counts")
async def category_counts(
    account_id: int,
    category_id: int,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """分类计数."""
    counter = MessageCounter(session)
    return _to_response(await counter.counts_for_category(category_id, account_id))
