"""消息合并服务 - 将一批候选消息写入存储."""

import logging
from dataclasses import dataclass, field

from sqlalchemy import String, cast, insert, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from feedvault.core.identity import AmbiguousMatchError, IdentityResolver
from feedvault.core.merge import MergeAction, MergeDecision, decide
from feedvault.core.urls import normalize_message_url
from feedvault.models.incoming import IncomingMessage
from feedvault.models.message import Message

logger = logging.getLogger(__name__)


@dataclass
class RowFailure:
    """单条消息的失败记录."""

    index: int
    title: str
    custom_id: str
    reason: str


@dataclass
class BatchResult:
    """一批消息的合并结果."""

    updated_count: int = 0  # 新增 + 更新后仍为未读的消息数
    any_changed: bool = False  # 是否做出过更新决策
    ok: bool = True
    failures: list[RowFailure] = field(default_factory=list)


class MessageReconciler:
    """批量合并协调器，一批消息对应一个事务."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.resolver = IdentityResolver(session)

    async def apply_batch(
        self,
        messages: list[IncomingMessage],
        feed_id: int,
        account_id: int,
        feed_url: str,
    ) -> BatchResult:
        """合并一批消息，整批提交或整批回滚."""
        if not messages:
            return BatchResult()

        result = BatchResult()

        try:
            if not self.session.in_transaction():
                await self.session.begin()

            for index, message in enumerate(messages):
                message.url = normalize_message_url(message.url, feed_url)
                await self._apply_one(index, message, feed_id, account_id, result)

            try:
                await self._fixup_custom_ids(feed_id, account_id)
            except SQLAlchemyError as e:
                logger.warning(f"custom_id 回填失败: feed={feed_id}, 错误={e}")

            await self.session.commit()

        except SQLAlchemyError:
            logger.exception(f"消息合并事务失败: feed={feed_id}, account={account_id}")
            await self.session.rollback()
            return BatchResult(ok=False, failures=result.failures)

        logger.info(
            f"合并完成: feed={feed_id}, 消息数={len(messages)}, "
            f"计数={result.updated_count}, 失败={len(result.failures)}"
        )
        return result

    async def _apply_one(
        self,
        index: int,
        message: IncomingMessage,
        feed_id: int,
        account_id: int,
        result: BatchResult,
    ) -> None:
        """处理单条消息，失败记入 result.failures 后继续."""
        try:
            existing = await self.resolver.resolve(message, feed_id, account_id)
            decision = decide(message, existing)

            if decision.action is MergeAction.UPDATE:
                result.any_changed = True

            await self._write(decision, feed_id, account_id)

        except (AmbiguousMatchError, SQLAlchemyError) as e:
            logger.warning(f"跳过消息 '{message.title}': {e}")
            result.failures.append(
                RowFailure(
                    index=index,
                    title=message.title,
                    custom_id=message.custom_id,
                    reason=str(e),
                )
            )
            return

        if decision.counts_as_updated:
            result.updated_count += 1

    async def _write(
        self,
        decision: MergeDecision,
        feed_id: int,
        account_id: int,
    ) -> None:
        """执行插入或更新."""
        if decision.action is MergeAction.INSERT:
            await self.session.execute(
                insert(Message).values(
                    feed_id=feed_id,
                    account_id=account_id,
                    is_deleted=False,
                    is_pdeleted=False,
                    **decision.values,
                )
            )
            logger.debug(f"新增消息: {decision.values['title']}")

        elif decision.action is MergeAction.UPDATE:
            await self.session.execute(
                update(Message)
                .where(Message.id == decision.existing_id)
                .values(**decision.values)
            )
            logger.debug(f"更新消息: {decision.values['title']}")

    async def _fixup_custom_ids(self, feed_id: int, account_id: int) -> None:
        """没有 custom_id 的消息使用自身主键作为 custom_id."""
        await self.session.execute(
            update(Message)
            .where(
                Message.feed_id == feed_id,
                Message.account_id == account_id,
                or_(
                    Message.custom_id.is_(None),  # type: ignore[union-attr]
                    Message.custom_id == "",
                ),
            )
            .values(custom_id=cast(Message.id, String))
            .execution_options(synchronize_session=False)
        )
