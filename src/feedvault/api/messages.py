"""消息 API."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from feedvault.core.messages import MessageStore
from feedvault.core.reconciler import MessageReconciler
from feedvault.models.database import get_session
from feedvault.models.incoming import IncomingMessage

router = APIRouter(prefix="/api", tags=["messages"])


class MessageBatch(BaseModel):
    """一批待合并的消息."""

    feed_url: str = Field(description="Feed 地址，用于补全相对链接")
    messages: list[IncomingMessage] = Field(default_factory=list)


class ReadRequest(BaseModel):
    ids: list[int]
    read: bool = True


class BinRequest(BaseModel):
    ids: list[int]
    deleted: bool = True


class IdsRequest(BaseModel):
    ids: list[int]


@router.post("/accounts/{account_id}/feeds/{feed_id}/messages")
async def ingest_messages(
    account_id: int,
    feed_id: int,
    batch: MessageBatch,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """合并一批抓取到的消息."""
    reconciler = MessageReconciler(session)
    result = await reconciler.apply_batch(
        batch.messages, feed_id, account_id, batch.feed_url
    )

    return {
        "ok": result.ok,
        "updated_count": result.updated_count,
        "any_changed": result.any_changed,
        "failures": [
            {
                "index": f.index,
                "title": f.title,
                "custom_id": f.custom_id,
                "reason": f.reason,
            }
            for f in result.failures
        ],
    }


@router.get("/accounts/{account_id}/feeds/{feed_id}/messages")
async def list_feed_messages(
    account_id: int,
    feed_id: int,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """获取 Feed 中的有效消息."""
    listing = await MessageStore(session).undeleted_messages_for_feed(
        feed_id, account_id
    )
    if not listing.ok:
        raise HTTPException(status_code=503, detail="消息查询失败")

    return {
        "total": len(listing.messages),
        "items": [m.model_dump(mode="json") for m in listing.messages],
        "errors": [{"id": e.row_id, "reason": e.reason} for e in listing.errors],
    }


def _require(ok: bool) -> dict:
    if not ok:
        raise HTTPException(status_code=503, detail="操作失败")
    return {"success": True}


@router.post("/messages/read")
async def mark_read(
    body: ReadRequest,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """标记消息已读/未读."""
    return _require(
        await MessageStore(session).mark_messages_read(body.ids, body.read)
    )


@router.post("/messages/important/switch")
async def switch_importance(
    body: IdsRequest,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """切换消息重要标记."""
    return _require(
        await MessageStore(session).switch_messages_importance(body.ids)
    )


@router.post("/messages/bin")
async def move_to_bin(
    body: BinRequest,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """移入或移出回收站."""
    return _require(
        await MessageStore(session).move_messages_to_bin(body.ids, body.deleted)
    )


@router.post("/messages/purge")
async def purge_messages(
    body: IdsRequest,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """永久删除消息."""
    return _require(
        await MessageStore(session).permanently_delete_messages(body.ids)
    )
