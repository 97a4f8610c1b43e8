"""账户、分类与 Feed 的存储操作."""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from feedvault.core.capabilities import IconCodec, NoopCipher, RawIconCodec, SecretCipher
from feedvault.core.tree import NodeKind, TreeNode, walk_post_order
from feedvault.models.account import Account
from feedvault.models.category import Category
from feedvault.models.feed import Feed
from feedvault.models.incoming import to_msecs
from feedvault.models.message import Message

logger = logging.getLogger(__name__)

SERVICE_STANDARD_RSS = "std-rss"
ROOT_CATEGORY_ID = 0


class AccountStore:
    """账户树的增删改查."""

    def __init__(
        self,
        session: AsyncSession,
        icon_codec: IconCodec | None = None,
        secret_cipher: SecretCipher | None = None,
    ) -> None:
        self.session = session
        self.icons = icon_codec or RawIconCodec()
        self.cipher = secret_cipher or NoopCipher()

    def _password(self, password: str | None) -> str | None:
        if not password:
            return password
        return self.cipher.encrypt(password)

    async def _commit(self, action: str) -> bool:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning(f"{action}失败: {e}")
            return False
        return True

    # 账户

    async def create_account(self, service_code: str) -> int | None:
        """创建账户，返回新账户 ID."""
        try:
            result = await self.session.execute(select(func.max(Account.id)))
            account_id = (result.scalar() or 0) + 1
            self.session.add(Account(id=account_id, type=service_code))
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning(f"创建账户失败: {e}")
            return None

        logger.info(f"已创建账户 {account_id} ({service_code})")
        return account_id

    async def get_accounts(self, service_code: str) -> list[int]:
        """获取指定服务类型的账户 ID."""
        stmt = select(Account.id).where(Account.type == service_code).order_by(Account.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_account(self, account_id: int) -> bool:
        """删除账户及其全部数据."""
        try:
            for model in (Message, Feed, Category):
                await self.session.execute(
                    delete(model).where(model.account_id == account_id)  # type: ignore[attr-defined]
                )
            await self.session.execute(delete(Account).where(Account.id == account_id))
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            logger.exception(f"删除账户 {account_id} 失败")
            return False
        return True

    async def delete_account_data(
        self, account_id: int, delete_messages_too: bool = True
    ) -> bool:
        """删除账户下的分类和 Feed（可选同时删除消息），保留账户本身."""
        models: list[Any] = [Feed, Category]
        if delete_messages_too:
            models.insert(0, Message)

        try:
            for model in models:
                await self.session.execute(
                    delete(model).where(model.account_id == account_id)
                )
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning(f"删除账户数据失败: {e}")
            return False
        return await self._commit("删除账户数据")

    # 分类

    async def add_category(
        self,
        parent_id: int,
        account_id: int,
        title: str,
        description: str | None = None,
        created_at: datetime | None = None,
        icon: Any = None,
    ) -> int | None:
        """新增分类，custom_id 与主键相同."""
        category = Category(
            parent_id=parent_id,
            title=title,
            description=description,
            date_created=to_msecs(created_at or datetime.now(UTC)),
            icon=self.icons.encode(icon),
            account_id=account_id,
        )
        try:
            self.session.add(category)
            await self.session.flush()
            category.custom_id = category.id
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning(f"新增分类失败: {e}")
            return None
        return category.id

    async def edit_category(
        self,
        category_id: int,
        parent_id: int,
        title: str,
        description: str | None = None,
        icon: Any = None,
    ) -> bool:
        """修改分类."""
        category = await self.session.get(Category, category_id)
        if not category:
            return False

        category.parent_id = parent_id
        category.title = title
        category.description = description
        category.icon = self.icons.encode(icon)
        return await self._commit("修改分类")

    async def delete_category(self, category_id: int) -> bool:
        """删除分类."""
        try:
            await self.session.execute(delete(Category).where(Category.id == category_id))
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning(f"删除分类失败: {e}")
            return False
        return await self._commit("删除分类")

    async def get_categories(self, account_id: int) -> list[tuple[int, Category]]:
        """获取账户下的分类，返回 (父分类 ID, 分类)."""
        stmt = select(Category).where(Category.account_id == account_id)
        result = await self.session.execute(stmt)
        return [(c.parent_id, c) for c in result.scalars().all()]

    # Feed

    async def add_feed(
        self,
        parent_id: int,
        account_id: int,
        title: str,
        url: str,
        *,
        description: str | None = None,
        created_at: datetime | None = None,
        icon: Any = None,
        encoding: str | None = None,
        is_protected: bool = False,
        username: str | None = None,
        password: str | None = None,
        update_type: int = 0,
        update_interval: int = 15,
        feed_type: int = 0,
    ) -> int | None:
        """新增 Feed，custom_id 与主键相同."""
        feed = Feed(
            title=title,
            description=description,
            date_created=to_msecs(created_at or datetime.now(UTC)),
            icon=self.icons.encode(icon),
            category=parent_id,
            encoding=encoding,
            url=url,
            protected=is_protected,
            username=username,
            password=self._password(password),
            update_type=update_type,
            update_interval=update_interval,
            type=feed_type,
            account_id=account_id,
        )
        try:
            self.session.add(feed)
            await self.session.flush()
            feed.custom_id = feed.id
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning(f"新增 Feed 失败: {e}")
            return None
        return feed.id

    async def edit_feed(
        self,
        feed_id: int,
        parent_id: int,
        title: str,
        url: str,
        *,
        description: str | None = None,
        icon: Any = None,
        encoding: str | None = None,
        is_protected: bool = False,
        username: str | None = None,
        password: str | None = None,
        update_type: int = 0,
        update_interval: int = 15,
        feed_type: int = 0,
    ) -> bool:
        """修改 Feed."""
        feed = await self.session.get(Feed, feed_id)
        if not feed:
            return False

        feed.title = title
        feed.description = description
        feed.icon = self.icons.encode(icon)
        feed.category = parent_id
        feed.encoding = encoding
        feed.url = url
        feed.protected = is_protected
        feed.username = username
        feed.password = self._password(password)
        feed.update_type = update_type
        feed.update_interval = update_interval
        feed.type = feed_type
        return await self._commit("修改 Feed")

    async def edit_base_feed(
        self, feed_id: int, update_type: int, update_interval: int
    ) -> bool:
        """只修改自动更新设置."""
        feed = await self.session.get(Feed, feed_id)
        if not feed:
            return False

        feed.update_type = update_type
        feed.update_interval = update_interval
        return await self._commit("修改更新设置")

    async def delete_feed(self, feed_custom_id: int, account_id: int) -> bool:
        """删除 Feed 及其消息."""
        try:
            await self.session.execute(
                delete(Message).where(
                    Message.feed_id == feed_custom_id,
                    Message.account_id == account_id,
                )
            )
            await self.session.execute(
                delete(Feed).where(
                    Feed.custom_id == feed_custom_id,
                    Feed.account_id == account_id,
                )
            )
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning(f"删除 Feed 失败: {e}")
            return False
        return await self._commit("删除 Feed")

    async def get_feeds(self, account_id: int) -> list[tuple[int, Feed]]:
        """获取账户下的 Feed，返回 (父分类 ID, Feed)."""
        stmt = select(Feed).where(Feed.account_id == account_id)
        result = await self.session.execute(stmt)
        return [(f.category, f) for f in result.scalars().all()]

    # 导入

    async def store_account_tree(self, root: TreeNode, account_id: int) -> bool:
        """
        保存整棵账户树（同步服务首次导入）.

        父子关系使用来源分配的 custom_id，因此节点写入顺序不影响结果。
        全部节点在一个事务中写入，成功后通过 assign_id 回写主键。
        """
        stored: list[tuple[TreeNode, Category | Feed]] = []

        for parent, node in walk_post_order(root):
            parent_custom_id = (
                ROOT_CATEGORY_ID
                if parent is None or parent.kind is NodeKind.ROOT
                else parent.custom_id
            )

            if node.kind is NodeKind.CATEGORY:
                row: Category | Feed = Category(
                    parent_id=parent_custom_id,
                    title=node.title,
                    icon=self.icons.encode(node.icon),
                    account_id=account_id,
                    custom_id=node.custom_id,
                )
            elif node.kind is NodeKind.FEED:
                row = Feed(
                    title=node.title,
                    icon=self.icons.encode(node.icon),
                    category=parent_custom_id,
                    protected=False,
                    update_type=node.update_type,
                    update_interval=node.update_interval,
                    account_id=account_id,
                    custom_id=node.custom_id,
                )
            else:
                continue

            self.session.add(row)
            stored.append((node, row))

        try:
            await self.session.flush()
            assigned = [(node, row.id) for node, row in stored]
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            logger.exception(f"保存账户 {account_id} 的树结构失败")
            return False

        for node, stored_id in assigned:
            if stored_id is not None:
                node.assign_id(stored_id)

        logger.info(f"账户 {account_id} 已保存 {len(stored)} 个节点")
        return True
