"""消息状态维护 - 已读、重要、回收站与清理."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import delete, not_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from feedvault.core.decoding import DecodeError, StoredMessage, decode_message_row
from feedvault.models.feed import Feed
from feedvault.models.incoming import to_msecs
from feedvault.models.message import Message

logger = logging.getLogger(__name__)


@dataclass
class MessageListing:
    """消息列表查询结果."""

    ok: bool = True
    messages: list[StoredMessage] = field(default_factory=list)
    errors: list[DecodeError] = field(default_factory=list)


@dataclass
class CustomIdListing:
    """custom_id 列表查询结果."""

    ok: bool = True
    custom_ids: list[str] = field(default_factory=list)


class MessageStore:
    """消息表上的批量操作."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _run(self, stmt: Any, action: str) -> bool:
        """执行一条写语句并提交，失败时回滚."""
        try:
            await self.session.execute(
                stmt.execution_options(synchronize_session=False)
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning(f"{action}失败: {e}")
            return False
        return True

    # 已读 / 重要

    async def mark_messages_read(self, ids: list[int], read: bool) -> bool:
        """标记消息已读/未读."""
        stmt = update(Message).where(Message.id.in_(ids)).values(is_read=read)  # type: ignore[union-attr]
        return await self._run(stmt, "标记已读")

    async def mark_message_important(self, message_id: int, important: bool) -> bool:
        """设置消息重要标记."""
        stmt = (
            update(Message)
            .where(Message.id == message_id)
            .values(is_important=important)
        )
        return await self._run(stmt, "设置重要标记")

    async def switch_messages_importance(self, ids: list[int]) -> bool:
        """切换消息重要标记."""
        stmt = (
            update(Message)
            .where(Message.id.in_(ids))  # type: ignore[union-attr]
            .values(is_important=not_(Message.is_important))
        )
        return await self._run(stmt, "切换重要标记")

    async def mark_feeds_read(
        self, feed_ids: list[int], account_id: int, read: bool
    ) -> bool:
        """标记若干 Feed 中的有效消息已读/未读."""
        stmt = (
            update(Message)
            .where(
                Message.feed_id.in_(feed_ids),  # type: ignore[attr-defined]
                Message.is_deleted == False,  # noqa: E712
                Message.is_pdeleted == False,  # noqa: E712
                Message.account_id == account_id,
            )
            .values(is_read=read)
        )
        return await self._run(stmt, "标记 Feed 已读")

    async def mark_bin_read(self, account_id: int, read: bool) -> bool:
        """标记回收站中的消息已读/未读."""
        stmt = (
            update(Message)
            .where(
                Message.is_deleted == True,  # noqa: E712
                Message.is_pdeleted == False,  # noqa: E712
                Message.account_id == account_id,
            )
            .values(is_read=read)
        )
        return await self._run(stmt, "标记回收站已读")

    async def mark_account_read(self, account_id: int, read: bool) -> bool:
        """标记账户下所有未永久删除的消息已读/未读."""
        stmt = (
            update(Message)
            .where(
                Message.is_pdeleted == False,  # noqa: E712
                Message.account_id == account_id,
            )
            .values(is_read=read)
        )
        return await self._run(stmt, "标记账户已读")

    # 回收站

    async def move_messages_to_bin(self, ids: list[int], deleted: bool = True) -> bool:
        """移入回收站（deleted=False 时从回收站恢复）."""
        stmt = update(Message).where(Message.id.in_(ids)).values(is_deleted=deleted)  # type: ignore[union-attr]
        return await self._run(stmt, "移入/恢复回收站")

    async def permanently_delete_messages(self, ids: list[int]) -> bool:
        """永久删除消息（保留行，仅标记）."""
        stmt = update(Message).where(Message.id.in_(ids)).values(is_pdeleted=True)  # type: ignore[union-attr]
        return await self._run(stmt, "永久删除")

    async def restore_bin(self, account_id: int) -> bool:
        """恢复回收站中的全部消息."""
        stmt = (
            update(Message)
            .where(
                Message.is_deleted == True,  # noqa: E712
                Message.is_pdeleted == False,  # noqa: E712
                Message.account_id == account_id,
            )
            .values(is_deleted=False)
        )
        return await self._run(stmt, "恢复回收站")

    async def purge_messages_from_bin(
        self, account_id: int, clear_only_read: bool = False
    ) -> bool:
        """清空回收站（标记为永久删除）."""
        criteria = [
            Message.is_deleted == True,  # noqa: E712
            Message.account_id == account_id,
        ]
        if clear_only_read:
            criteria.append(Message.is_read == True)  # noqa: E712

        stmt = update(Message).where(*criteria).values(is_pdeleted=True)
        return await self._run(stmt, "清空回收站")

    async def clean_feeds(
        self, feed_ids: list[int], account_id: int, clean_read_only: bool = False
    ) -> bool:
        """将 Feed 中的有效消息移入回收站."""
        criteria = [
            Message.feed_id.in_(feed_ids),  # type: ignore[attr-defined]
            Message.is_deleted == False,  # noqa: E712
            Message.is_pdeleted == False,  # noqa: E712
            Message.account_id == account_id,
        ]
        if clean_read_only:
            criteria.append(Message.is_read == True)  # noqa: E712

        stmt = update(Message).where(*criteria).values(is_deleted=True)
        return await self._run(stmt, "清理 Feed")

    # 数据库清理（物理删除，跨账户）

    async def purge_important_messages(self) -> bool:
        """删除所有重要消息."""
        stmt = delete(Message).where(Message.is_important == True)  # noqa: E712
        return await self._run(stmt, "删除重要消息")

    async def purge_read_messages(self) -> bool:
        """删除不在回收站且非重要的已读消息."""
        stmt = delete(Message).where(
            Message.is_important == False,  # noqa: E712
            Message.is_deleted == False,  # noqa: E712
            Message.is_read == True,  # noqa: E712
        )
        return await self._run(stmt, "删除已读消息")

    async def purge_old_messages(self, older_than_days: int) -> bool:
        """删除早于指定天数的非重要消息."""
        cutoff = to_msecs(datetime.now(UTC) - timedelta(days=older_than_days))
        stmt = delete(Message).where(
            Message.is_important == False,  # noqa: E712
            Message.date_created < cutoff,
        )
        return await self._run(stmt, "删除旧消息")

    async def purge_recycle_bin(self) -> bool:
        """删除回收站中的非重要消息."""
        stmt = delete(Message).where(
            Message.is_important == False,  # noqa: E712
            Message.is_deleted == True,  # noqa: E712
        )
        return await self._run(stmt, "删除回收站消息")

    async def purge_leftover_messages(self, account_id: int) -> bool:
        """删除所属 Feed 已不存在的消息."""
        feed_ids = select(Feed.custom_id).where(Feed.account_id == account_id)
        stmt = delete(Message).where(
            Message.account_id == account_id,
            Message.feed_id.not_in(feed_ids),  # type: ignore[attr-defined]
        )
        return await self._run(stmt, "删除残留消息")

    # 查询

    async def custom_ids_for_account(self, account_id: int) -> CustomIdListing:
        """账户下有效消息的 custom_id."""
        return await self._custom_ids(
            Message.account_id == account_id,
            Message.is_deleted == False,  # noqa: E712
        )

    async def custom_ids_for_bin(self, account_id: int) -> CustomIdListing:
        """回收站中消息的 custom_id."""
        return await self._custom_ids(
            Message.account_id == account_id,
            Message.is_deleted == True,  # noqa: E712
        )

    async def custom_ids_for_feed(self, feed_id: int, account_id: int) -> CustomIdListing:
        """Feed 中有效消息的 custom_id."""
        return await self._custom_ids(
            Message.feed_id == feed_id,
            Message.account_id == account_id,
            Message.is_deleted == False,  # noqa: E712
        )

    async def _custom_ids(self, *criteria: Any) -> CustomIdListing:
        stmt = select(Message.custom_id).where(
            Message.is_pdeleted == False,  # noqa: E712
            *criteria,
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.warning(f"custom_id 查询失败: {e}")
            return CustomIdListing(ok=False)

        return CustomIdListing(
            custom_ids=[value for value in result.scalars().all() if value]
        )

    async def undeleted_messages_for_feed(
        self, feed_id: int, account_id: int
    ) -> MessageListing:
        """Feed 中的有效消息."""
        return await self._messages(
            Message.feed_id == feed_id,
            Message.account_id == account_id,
            Message.is_deleted == False,  # noqa: E712
        )

    async def undeleted_messages_for_bin(self, account_id: int) -> MessageListing:
        """回收站中的消息."""
        return await self._messages(
            Message.account_id == account_id,
            Message.is_deleted == True,  # noqa: E712
        )

    async def undeleted_messages_for_account(self, account_id: int) -> MessageListing:
        """账户下的有效消息."""
        return await self._messages(
            Message.account_id == account_id,
            Message.is_deleted == False,  # noqa: E712
        )

    async def _messages(self, *criteria: Any) -> MessageListing:
        """查询消息并逐行解析，解析失败的行记入 errors."""
        table = Message.__table__  # type: ignore[attr-defined]
        stmt = (
            table.select()
            .where(Message.is_pdeleted == False, *criteria)  # noqa: E712
            .order_by(Message.id)
        )
        try:
            result = await self.session.execute(stmt)
            rows = result.mappings().all()
        except SQLAlchemyError as e:
            logger.warning(f"消息查询失败: {e}")
            return MessageListing(ok=False)

        listing = MessageListing()
        for row in rows:
            try:
                listing.messages.append(decode_message_row(row))
            except DecodeError as e:
                logger.warning(str(e))
                listing.errors.append(e)
        return listing
