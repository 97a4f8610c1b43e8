"""Feed 订阅源模型."""

from sqlmodel import Field, SQLModel


class Feed(SQLModel, table=True):
    """订阅源."""

    __tablename__ = "feeds"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(description="Feed 标题")
    description: str | None = Field(default=None, description="描述")
    date_created: int | None = Field(default=None, description="创建时间（毫秒时间戳）")
    icon: bytes | None = Field(default=None, description="图标（由 IconCodec 编码）")
    category: int = Field(default=0, description="父分类 custom_id，0 表示账户根节点")
    encoding: str | None = Field(default=None, description="内容编码")
    url: str | None = Field(default=None, description="Feed URL")
    protected: bool = Field(default=False, description="是否需要认证")
    username: str | None = Field(default=None)
    password: str | None = Field(default=None, description="由 SecretCipher 加密")
    update_type: int = Field(default=0, description="自动更新策略")
    update_interval: int = Field(default=15, description="自动更新间隔（分钟）")
    type: int = Field(default=0, description="Feed 格式")
    account_id: int = Field(index=True, description="所属账户")
    custom_id: int | None = Field(default=None, description="来源分配的 ID")
