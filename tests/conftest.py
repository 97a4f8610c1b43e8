"""测试配置和 fixtures."""

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel, select

from feedvault.models.feed import Feed
from feedvault.models.message import Message

ACCOUNT_ID = 1
FEED_ID = 10
FEED_URL = "https://site.test/feed"


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """创建测试用的内存数据库."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """创建测试用的数据库会话."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def sample_feed(async_session: AsyncSession) -> Feed:
    """创建测试用的 Feed（custom_id 与主键相同）."""
    feed = Feed(
        id=FEED_ID,
        custom_id=FEED_ID,
        title="Test Feed",
        url=FEED_URL,
        category=0,
        account_id=ACCOUNT_ID,
    )
    async_session.add(feed)
    await async_session.commit()
    return feed


@pytest.fixture
def add_message(
    async_session: AsyncSession,
) -> Callable[..., Awaitable[Message]]:
    """直接写入一条已存储消息."""

    async def _add(**fields: Any) -> Message:
        values: dict[str, Any] = {
            "feed_id": FEED_ID,
            "account_id": ACCOUNT_ID,
            "title": "Stored",
            "url": "https://site.test/stored",
            "author": "",
            "date_created": 100,
        }
        values.update(fields)
        message = Message(**values)
        async_session.add(message)
        await async_session.commit()
        return message

    return _add


@pytest.fixture
def load_messages(
    async_session: AsyncSession,
) -> Callable[..., Awaitable[list[Message]]]:
    """从数据库重新读取消息（绕过会话缓存）."""

    async def _load(*criteria: Any) -> list[Message]:
        stmt = (
            select(Message)
            .where(*criteria)
            .order_by(Message.id)
            .execution_options(populate_existing=True)
        )
        result = await async_session.execute(stmt)
        return list(result.scalars().all())

    return _load
