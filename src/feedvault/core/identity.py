"""消息身份识别 - 判断候选消息是否已存储."""

from dataclasses import dataclass
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from feedvault.models.incoming import IncomingMessage
from feedvault.models.message import Message


class IdentityStrategy(str, Enum):
    """身份识别策略."""

    CUSTOM_ID = "custom_id"  # 同步服务分配的 ID
    URL = "url"  # feed + title + url + author


class AmbiguousMatchError(Exception):
    """多条已存储消息匹配同一身份."""

    def __init__(self, message_ids: list[int]) -> None:
        super().__init__(f"身份匹配不唯一: {message_ids}")
        self.message_ids = message_ids


@dataclass(frozen=True)
class ExistingRecord:
    """已存储消息中参与合并判断的字段."""

    id: int
    created_at_ms: int
    is_read: bool
    is_important: bool
    matched_by: IdentityStrategy


def strategy_for(candidate: IncomingMessage) -> IdentityStrategy:
    """有 custom_id 时只按 custom_id 识别，否则按链接识别."""
    if candidate.custom_id:
        return IdentityStrategy.CUSTOM_ID
    return IdentityStrategy.URL


class IdentityResolver:
    """身份识别器（只读）."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def resolve(
        self,
        candidate: IncomingMessage,
        feed_id: int,
        account_id: int,
    ) -> ExistingRecord | None:
        """
        查找与候选消息对应的已存储消息.

        Raises:
            AmbiguousMatchError: 按链接识别时匹配到多条消息
        """
        strategy = strategy_for(candidate)
        columns = (
            Message.id,
            Message.date_created,
            Message.is_read,
            Message.is_important,
        )

        if strategy is IdentityStrategy.CUSTOM_ID:
            # (account_id, custom_id) 有唯一约束
            stmt = select(*columns).where(
                Message.account_id == account_id,
                Message.custom_id == candidate.custom_id,
            )
        else:
            # 回收站中的消息同样可以匹配
            stmt = (
                select(*columns)
                .where(
                    Message.feed_id == feed_id,
                    Message.account_id == account_id,
                    Message.title == candidate.title,
                    Message.url == candidate.url,
                    Message.author == candidate.author,
                    Message.is_pdeleted == False,  # noqa: E712
                )
                .order_by(Message.id)
                .limit(2)
            )

        result = await self.session.execute(stmt)
        rows = result.all()

        if not rows:
            return None
        if len(rows) > 1:
            raise AmbiguousMatchError([row.id for row in rows])

        row = rows[0]
        return ExistingRecord(
            id=row.id,
            created_at_ms=row.date_created,
            is_read=bool(row.is_read),
            is_important=bool(row.is_important),
            matched_by=strategy,
        )
