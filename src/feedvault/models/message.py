"""Message 消息模型."""

from sqlalchemy import Index, UniqueConstraint
from sqlmodel import Field, SQLModel


class Message(SQLModel, table=True):
    """存储的 Feed 消息."""

    __tablename__ = "messages"  # type: ignore[assignment]
    __table_args__ = (
        UniqueConstraint("account_id", "custom_id", name="uq_messages_custom_id"),
        Index(
            "ix_messages_url_identity",
            "feed_id",
            "account_id",
            "title",
            "url",
            "author",
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    feed_id: int = Field(description="所属 Feed 的 custom_id")
    account_id: int = Field(index=True, description="所属账户")
    custom_id: str | None = Field(default=None, description="来源分配的稳定 ID")
    custom_hash: str | None = Field(default=None, description="来源提供的内容指纹")
    title: str = Field(default="", description="标题")
    url: str = Field(default="", description="原文链接")
    author: str = Field(default="", description="作者")
    contents: str | None = Field(default=None, description="HTML 内容")
    enclosures: str = Field(default="", description="附件（编码后的文本）")
    date_created: int = Field(default=0, description="发布时间（毫秒时间戳）")
    is_read: bool = Field(default=False, description="是否已读")
    is_important: bool = Field(default=False, description="是否重要")
    is_deleted: bool = Field(default=False, description="是否在回收站")
    is_pdeleted: bool = Field(default=False, description="是否已永久删除")
