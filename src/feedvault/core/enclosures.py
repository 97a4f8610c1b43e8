"""附件列表的文本编码."""

import base64
import binascii

from feedvault.models.incoming import Enclosure

OUTER_SEPARATOR = "&"
INNER_SEPARATOR = "#"


def _b64encode(value: str) -> str:
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def _b64decode(value: str) -> str:
    return base64.b64decode(value.encode("ascii"), validate=True).decode("utf-8")


def encode_enclosures(enclosures: list[Enclosure]) -> str:
    """将附件列表编码为单个文本."""
    return OUTER_SEPARATOR.join(
        _b64encode(item.mime_type) + INNER_SEPARATOR + _b64encode(item.url)
        for item in enclosures
    )


def decode_enclosures(blob: str | None) -> list[Enclosure]:
    """
    解析附件文本.

    Raises:
        ValueError: 文本格式损坏
    """
    if not blob:
        return []

    enclosures: list[Enclosure] = []
    for chunk in blob.split(OUTER_SEPARATOR):
        mime_part, sep, url_part = chunk.partition(INNER_SEPARATOR)
        if not sep:
            msg = f"附件缺少分隔符: {chunk!r}"
            raise ValueError(msg)
        try:
            enclosures.append(
                Enclosure(mime_type=_b64decode(mime_part), url=_b64decode(url_part))
            )
        except (binascii.Error, UnicodeError) as e:
            msg = f"附件编码损坏: {e}"
            raise ValueError(msg) from e
    return enclosures
