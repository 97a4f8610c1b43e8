"""Account 账户模型."""

from sqlmodel import Field, SQLModel


class Account(SQLModel, table=True):
    """服务账户（标准 RSS / 同步服务）."""

    __tablename__ = "accounts"  # type: ignore[assignment]

    id: int = Field(primary_key=True, description="账户 ID（max(id) + 1 分配）")
    type: str = Field(description="服务代码: std-rss|tt-rss|owncloud")
