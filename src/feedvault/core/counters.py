"""消息计数查询（只读）."""

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from feedvault.models.feed import Feed
from feedvault.models.message import Message

logger = logging.getLogger(__name__)


@dataclass
class MessageCounts:
    """计数结果: feed_id -> (未读数, 总数)."""

    ok: bool = True
    counts: dict[int, tuple[int, int]] = field(default_factory=dict)

    @property
    def unread(self) -> int:
        """所有 Feed 的未读数之和."""
        return sum(unread for unread, _ in self.counts.values())

    @property
    def total(self) -> int:
        """所有 Feed 的消息总数之和."""
        return sum(total for _, total in self.counts.values())


class MessageCounter:
    """按 Feed / 分类 / 账户 / 回收站统计消息数量."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def counts_for_feed(self, feed_id: int, account_id: int) -> MessageCounts:
        """单个 Feed 的计数."""
        return await self._grouped_counts(
            Message.feed_id == feed_id,
            account_id=account_id,
            in_bin=False,
        )

    async def counts_for_category(
        self, category_id: int, account_id: int
    ) -> MessageCounts:
        """分类下所有 Feed 的计数（category_id 为分类的 custom_id）."""
        feed_ids = select(Feed.custom_id).where(
            Feed.category == category_id,
            Feed.account_id == account_id,
        )
        return await self._grouped_counts(
            Message.feed_id.in_(feed_ids),  # type: ignore[attr-defined]
            account_id=account_id,
            in_bin=False,
        )

    async def counts_for_account(self, account_id: int) -> MessageCounts:
        """账户下所有 Feed 的计数."""
        return await self._grouped_counts(account_id=account_id, in_bin=False)

    async def counts_for_bin(self, account_id: int) -> MessageCounts:
        """回收站中的计数."""
        return await self._grouped_counts(account_id=account_id, in_bin=True)

    async def _grouped_counts(
        self,
        *criteria: Any,
        account_id: int,
        in_bin: bool,
    ) -> MessageCounts:
        """按 feed_id 分组统计，永久删除的消息始终排除."""
        unread = func.sum(case((Message.is_read == False, 1), else_=0))  # noqa: E712
        stmt = (
            select(Message.feed_id, unread, func.count())
            .where(
                Message.account_id == account_id,
                Message.is_deleted == in_bin,
                Message.is_pdeleted == False,  # noqa: E712
                *criteria,
            )
            .group_by(Message.feed_id)
        )

        try:
            result = await self.session.execute(stmt)
            rows = result.all()
        except SQLAlchemyError as e:
            logger.warning(f"计数查询失败: account={account_id}, 错误={e}")
            return MessageCounts(ok=False)

        return MessageCounts(
            counts={
                feed_id: (int(unread_count or 0), int(total))
                for feed_id, unread_count, total in rows
            }
        )
