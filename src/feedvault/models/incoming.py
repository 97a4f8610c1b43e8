"""待合并的候选消息（由抓取层提供）."""

from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, Field

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def to_msecs(value: datetime) -> int:
    """datetime 转毫秒时间戳（naive 时间按 UTC 处理）."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return (value - _EPOCH) // timedelta(milliseconds=1)


def from_msecs(value: int) -> datetime:
    """毫秒时间戳转 UTC datetime."""
    return _EPOCH + timedelta(milliseconds=value)


class Enclosure(BaseModel):
    """消息附件."""

    url: str
    mime_type: str = ""


class IncomingMessage(BaseModel):
    """从远端解析出的候选消息."""

    title: str = ""
    url: str = ""
    author: str = ""
    contents: str | None = None
    enclosures: list[Enclosure] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    created_from_feed: bool = False  # 时间戳来自 Feed 而非入库时间
    is_read: bool = False
    is_important: bool = False
    custom_id: str = ""
    custom_hash: str = ""

    @property
    def created_at_ms(self) -> int:
        """发布时间的毫秒时间戳."""
        return to_msecs(self.created_at)
