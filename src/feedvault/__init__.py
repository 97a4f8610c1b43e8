"""FeedVault - RSS 消息存储与同步合并引擎."""

__version__ = "0.1.0"
