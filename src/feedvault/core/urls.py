"""消息链接规范化."""

from urllib.parse import urlsplit, urlunsplit

SCHEME_HTTP = "http:"


def site_origin(feed_url: str) -> str:
    """
    取 Feed 地址的站点部分.

    去掉用户信息、路径、查询和片段，不带结尾斜杠。
    """
    parts = urlsplit(feed_url)
    host = parts.netloc.rpartition("@")[2]
    return urlunsplit((parts.scheme, host, "", "", "")).rstrip("/")


def normalize_message_url(url: str, feed_url: str) -> str:
    """
    将相对链接转换为绝对链接.

    Args:
        url: 消息中的链接
        feed_url: 所属 Feed 的地址

    Returns:
        "//host/a" 补全为 "http://host/a"，"/a" 拼接到 Feed 站点之后，其余原样返回
    """
    if url.startswith("//"):
        return SCHEME_HTTP + url
    if url.startswith("/"):
        return site_origin(feed_url) + url
    return url
