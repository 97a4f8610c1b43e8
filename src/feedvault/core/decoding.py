"""数据库行到消息对象的类型化映射."""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ValidationError

from feedvault.core.enclosures import decode_enclosures
from feedvault.models.incoming import Enclosure, from_msecs


class DecodeError(Exception):
    """数据库行无法解析为消息."""

    def __init__(self, row_id: Any, reason: str) -> None:
        super().__init__(f"消息 {row_id} 解析失败: {reason}")
        self.row_id = row_id
        self.reason = reason


class StoredMessage(BaseModel):
    """已存储的消息."""

    id: int
    feed_id: int
    account_id: int
    custom_id: str | None = None
    custom_hash: str | None = None
    title: str
    url: str
    author: str
    contents: str | None = None
    enclosures: list[Enclosure]
    created_at: datetime
    is_read: bool
    is_important: bool
    is_deleted: bool
    is_pdeleted: bool


def decode_message_row(row: Mapping[str, Any]) -> StoredMessage:
    """
    将 messages 表的一行转换为 StoredMessage.

    Raises:
        DecodeError: 缺少字段、类型不符或附件损坏
    """
    row_id = row.get("id")
    try:
        enclosures = decode_enclosures(row.get("enclosures"))
        date_created = row.get("date_created")
        if date_created is None:
            msg = "缺少 date_created"
            raise ValueError(msg)
        data = {
            key: row.get(key)
            for key in StoredMessage.model_fields
            if key not in ("enclosures", "created_at")
        }
        return StoredMessage.model_validate(
            {
                **data,
                "enclosures": enclosures,
                "created_at": from_msecs(int(date_created)),
            }
        )
    except ValidationError as e:
        raise DecodeError(row_id, f"{e.error_count()} 个字段无效") from e
    except (ValueError, TypeError) as e:
        raise DecodeError(row_id, str(e)) from e
