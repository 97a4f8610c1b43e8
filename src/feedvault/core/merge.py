"""合并决策 - 新增、更新或跳过."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from feedvault.core.enclosures import encode_enclosures
from feedvault.core.identity import ExistingRecord, IdentityStrategy
from feedvault.models.incoming import IncomingMessage


class MergeAction(str, Enum):
    """合并动作."""

    INSERT = "insert"
    UPDATE = "update"
    SKIP = "skip"


@dataclass
class MergeDecision:
    """合并决策及需要写入的字段."""

    action: MergeAction
    values: dict[str, Any] = field(default_factory=dict)
    existing_id: int | None = None

    @property
    def counts_as_updated(self) -> bool:
        """新增总是计数；更新只在结果为未读时计数."""
        if self.action is MergeAction.INSERT:
            return True
        if self.action is MergeAction.UPDATE:
            return not self.values["is_read"]
        return False


def _needs_update(candidate: IncomingMessage, existing: ExistingRecord) -> bool:
    timestamp_changed = candidate.created_at_ms != existing.created_at_ms

    if existing.matched_by is IdentityStrategy.CUSTOM_ID:
        # 同步服务可以推送已读/重要状态
        return (
            timestamp_changed
            or candidate.is_read != existing.is_read
            or candidate.is_important != existing.is_important
        )

    return candidate.created_from_feed and timestamp_changed


def decide(
    candidate: IncomingMessage,
    existing: ExistingRecord | None,
) -> MergeDecision:
    """根据候选消息和已存储消息计算合并决策."""
    content = {
        "title": candidate.title,
        "url": candidate.url,
        "author": candidate.author,
        "date_created": candidate.created_at_ms,
        "contents": candidate.contents,
        "enclosures": encode_enclosures(candidate.enclosures),
    }

    if existing is None:
        return MergeDecision(
            action=MergeAction.INSERT,
            values={
                **content,
                "is_read": candidate.is_read,
                "is_important": candidate.is_important,
                "custom_id": candidate.custom_id or None,
                "custom_hash": candidate.custom_hash or None,
            },
        )

    if not _needs_update(candidate, existing):
        return MergeDecision(action=MergeAction.SKIP, existing_id=existing.id)

    if existing.matched_by is IdentityStrategy.CUSTOM_ID:
        is_read, is_important = candidate.is_read, candidate.is_important
    else:
        # 按链接识别的消息保留本地已读/重要状态
        is_read, is_important = existing.is_read, existing.is_important

    return MergeDecision(
        action=MergeAction.UPDATE,
        values={**content, "is_read": is_read, "is_important": is_important},
        existing_id=existing.id,
    )
