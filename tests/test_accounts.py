"""测试账户、分类与 Feed 存储."""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from feedvault.core.accounts import ROOT_CATEGORY_ID, SERVICE_STANDARD_RSS, AccountStore
from feedvault.core.tree import NodeKind, walk_post_order
from feedvault.models.account import Account
from feedvault.models.category import Category
from feedvault.models.feed import Feed
from feedvault.models.message import Message

AddMessage = Callable[..., Awaitable[Message]]


@dataclass
class Node:
    """测试用的树节点."""

    kind: NodeKind
    title: str = ""
    custom_id: int = 0
    icon: Any = None
    update_type: int = 0
    update_interval: int = 15
    items: list["Node"] = field(default_factory=list)
    stored_id: int | None = None

    def children(self) -> Sequence["Node"]:
        return self.items

    def assign_id(self, stored_id: int) -> None:
        self.stored_id = stored_id


class ReversingCipher:
    """测试用的加密器."""

    def encrypt(self, plain: str) -> str:
        return plain[::-1]


class TestAccounts:
    """账户."""

    async def test_create_account_assigns_next_id(
        self, async_session: AsyncSession
    ) -> None:
        """账户 ID 为 max(id) + 1."""
        store = AccountStore(async_session)

        assert await store.create_account(SERVICE_STANDARD_RSS) == 1
        assert await store.create_account("tt-rss") == 2
        assert await store.get_accounts(SERVICE_STANDARD_RSS) == [1]

    async def test_delete_account_removes_everything(
        self, async_session: AsyncSession, add_message: AddMessage
    ) -> None:
        """删除账户时同时删除分类、Feed 和消息."""
        store = AccountStore(async_session)
        account_id = await store.create_account(SERVICE_STANDARD_RSS)
        assert account_id == 1
        await store.add_category(ROOT_CATEGORY_ID, account_id, "News")
        await store.add_feed(0, account_id, "Blog", "https://blog.test/rss")
        await add_message(account_id=account_id)

        assert await store.delete_account(account_id)

        for model in (Account, Category, Feed, Message):
            result = await async_session.execute(select(model))
            assert result.scalars().all() == []

    async def test_delete_account_data_keeps_messages(
        self, async_session: AsyncSession, add_message: AddMessage
    ) -> None:
        """delete_messages_too=False 时保留消息和账户."""
        store = AccountStore(async_session)
        account_id = await store.create_account(SERVICE_STANDARD_RSS)
        assert account_id is not None
        await store.add_feed(0, account_id, "Blog", "https://blog.test/rss")
        await add_message(account_id=account_id)

        assert await store.delete_account_data(account_id, delete_messages_too=False)

        assert await store.get_feeds(account_id) == []
        assert await store.get_accounts(SERVICE_STANDARD_RSS) == [account_id]
        messages = await async_session.execute(select(Message))
        assert len(messages.scalars().all()) == 1


class TestCategories:
    """分类."""

    async def test_add_category_sets_custom_id(self, async_session: AsyncSession) -> None:
        """custom_id 与主键相同."""
        store = AccountStore(async_session)
        category_id = await store.add_category(
            ROOT_CATEGORY_ID, 1, "News", description="daily", icon=b"\x89PNG"
        )

        categories = await store.get_categories(1)
        assert len(categories) == 1
        parent_id, category = categories[0]
        assert parent_id == ROOT_CATEGORY_ID
        assert category.id == category_id
        assert category.custom_id == category_id
        assert category.icon == b"\x89PNG"
        assert category.date_created is not None

    async def test_edit_and_delete_category(self, async_session: AsyncSession) -> None:
        """修改和删除分类."""
        store = AccountStore(async_session)
        category_id = await store.add_category(ROOT_CATEGORY_ID, 1, "News")
        assert category_id is not None

        assert await store.edit_category(category_id, 7, "World")
        _, category = (await store.get_categories(1))[0]
        assert category.title == "World"
        assert category.parent_id == 7

        assert await store.delete_category(category_id)
        assert await store.get_categories(1) == []

    async def test_edit_missing_category(self, async_session: AsyncSession) -> None:
        """分类不存在时返回 False."""
        assert await AccountStore(async_session).edit_category(404, 0, "x") is False

    async def test_unsupported_icon_is_rejected(self, async_session: AsyncSession) -> None:
        """默认图标编码器只接受字节."""
        with pytest.raises(TypeError):
            await AccountStore(async_session).add_category(0, 1, "News", icon="icon.png")


class TestFeeds:
    """Feed."""

    async def test_add_feed_encrypts_password(self, async_session: AsyncSession) -> None:
        """密码经注入的加密器加密后存储."""
        store = AccountStore(async_session, secret_cipher=ReversingCipher())
        feed_id = await store.add_feed(
            3,
            1,
            "Private",
            "https://private.test/rss",
            is_protected=True,
            username="me",
            password="secret",
            update_interval=30,
        )

        feeds = await store.get_feeds(1)
        parent_id, feed = feeds[0]
        assert parent_id == 3
        assert feed.id == feed_id
        assert feed.custom_id == feed_id
        assert feed.protected is True
        assert feed.password == "terces"
        assert feed.update_interval == 30

    async def test_edit_feed(self, async_session: AsyncSession) -> None:
        """修改 Feed 全部可编辑字段."""
        store = AccountStore(async_session)
        feed_id = await store.add_feed(0, 1, "Blog", "https://blog.test/rss")
        assert feed_id is not None

        assert await store.edit_feed(
            feed_id, 4, "Blog 2", "https://blog.test/atom", encoding="utf-8"
        )
        assert await store.edit_base_feed(feed_id, update_type=2, update_interval=60)

        _, feed = (await store.get_feeds(1))[0]
        assert feed.title == "Blog 2"
        assert feed.category == 4
        assert feed.url == "https://blog.test/atom"
        assert feed.encoding == "utf-8"
        assert feed.update_type == 2
        assert feed.update_interval == 60

    async def test_delete_feed_removes_messages(
        self, async_session: AsyncSession, add_message: AddMessage
    ) -> None:
        """删除 Feed 时同时删除其消息."""
        store = AccountStore(async_session)
        feed_id = await store.add_feed(0, 1, "Blog", "https://blog.test/rss")
        assert feed_id is not None
        await add_message(feed_id=feed_id)
        await add_message(feed_id=feed_id + 1)

        assert await store.delete_feed(feed_id, 1)

        assert await store.get_feeds(1) == []
        result = await async_session.execute(select(Message.feed_id))
        assert result.scalars().all() == [feed_id + 1]


class TestAccountTree:
    """整棵树导入."""

    def _tree(self) -> Node:
        return Node(
            kind=NodeKind.ROOT,
            items=[
                Node(
                    kind=NodeKind.CATEGORY,
                    title="Tech",
                    custom_id=100,
                    items=[
                        Node(
                            kind=NodeKind.CATEGORY,
                            title="Python",
                            custom_id=101,
                            items=[
                                Node(kind=NodeKind.FEED, title="PyFeed", custom_id=7)
                            ],
                        ),
                        Node(kind=NodeKind.FEED, title="TechFeed", custom_id=8),
                    ],
                ),
                Node(kind=NodeKind.FEED, title="RootFeed", custom_id=9, update_type=1),
            ],
        )

    def test_walk_post_order(self) -> None:
        """子节点先于父节点产出，根节点不产出."""
        order = [node.title for _, node in walk_post_order(self._tree())]
        assert order == ["PyFeed", "Python", "TechFeed", "Tech", "RootFeed"]

    async def test_store_account_tree(self, async_session: AsyncSession) -> None:
        """父子关系使用 custom_id，主键回写到节点."""
        tree = self._tree()

        store = AccountStore(async_session)
        assert await store.store_account_tree(tree, 2)

        categories = {c.title: c for _, c in await store.get_categories(2)}
        feeds = {f.title: f for _, f in await store.get_feeds(2)}

        assert categories["Tech"].parent_id == ROOT_CATEGORY_ID
        assert categories["Python"].parent_id == 100
        assert feeds["PyFeed"].category == 101
        assert feeds["TechFeed"].category == 100
        assert feeds["RootFeed"].category == ROOT_CATEGORY_ID
        assert feeds["RootFeed"].update_type == 1

        tech = tree.items[0]
        assert tech.stored_id == categories["Tech"].id
        assert tree.items[1].stored_id == feeds["RootFeed"].id
        assert tree.stored_id is None
