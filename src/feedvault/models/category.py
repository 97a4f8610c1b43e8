"""Category 分类模型."""

from sqlmodel import Field, SQLModel


class Category(SQLModel, table=True):
    """订阅分类."""

    __tablename__ = "categories"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    parent_id: int = Field(default=0, description="父分类 custom_id，0 表示账户根节点")
    title: str = Field(description="分类标题")
    description: str | None = Field(default=None, description="描述")
    date_created: int | None = Field(default=None, description="创建时间（毫秒时间戳）")
    icon: bytes | None = Field(default=None, description="图标（由 IconCodec 编码）")
    account_id: int = Field(index=True, description="所属账户")
    custom_id: int | None = Field(default=None, description="来源分配的 ID")
