"""账户 API."""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from feedvault.core.accounts import SERVICE_STANDARD_RSS, AccountStore
from feedvault.core.messages import MessageStore
from feedvault.models.database import get_session

router = APIRouter(prefix="/api/accounts", tags=["accounts"])


class AccountCreate(BaseModel):
    type: str = SERVICE_STANDARD_RSS


@router.post("")
async def create_account(
    body: AccountCreate,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """创建账户."""
    account_id = await AccountStore(session).create_account(body.type)
    if account_id is None:
        raise HTTPException(status_code=503, detail="创建账户失败")
    return {"id": account_id, "type": body.type}


@router.delete("/{account_id}")
async def delete_account(
    account_id: int,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """删除账户及其全部数据."""
    if not await AccountStore(session).delete_account(account_id):
        raise HTTPException(status_code=503, detail="删除账户失败")
    return {"id": account_id, "deleted": True}


@router.post("/{account_id}/read")
async def mark_account_read(
    account_id: int,
    read: bool = Query(True, description="已读/未读"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """标记账户下全部消息已读/未读."""
    if not await MessageStore(session).mark_account_read(account_id, read):
        raise HTTPException(status_code=503, detail="操作失败")
    return {"id": account_id, "read": read}


@router.post("/{account_id}/bin/restore")
async def restore_bin(
    account_id: int,
    session: AsyncSession = Depends(get_session),
) -> dict:
    """恢复回收站."""
    if not await MessageStore(session).restore_bin(account_id):
        raise HTTPException(status_code=503, detail="恢复回收站失败")
    return {"id": account_id, "restored": True}


@router.post("/{account_id}/bin/purge")
async def purge_bin(
    account_id: int,
    only_read: bool = Query(False, description="只清理已读消息"),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """清空回收站."""
    store = MessageStore(session)
    if not await store.purge_messages_from_bin(account_id, clear_only_read=only_read):
        raise HTTPException(status_code=503, detail="清空回收站失败")
    return {"id": account_id, "purged": True}
