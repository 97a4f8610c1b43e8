"""注入的能力接口：图标编码与凭据加密."""

from typing import Any, Protocol


class IconCodec(Protocol):
    """将图标对象编码为可存储的字节."""

    def encode(self, icon: Any) -> bytes | None: ...


class SecretCipher(Protocol):
    """加密需要存储的凭据."""

    def encrypt(self, plain: str) -> str: ...


class RawIconCodec:
    """图标已经是字节时原样存储."""

    def encode(self, icon: Any) -> bytes | None:
        if icon is None:
            return None
        if isinstance(icon, bytes | bytearray):
            return bytes(icon)
        msg = f"无法编码图标类型: {type(icon).__name__}"
        raise TypeError(msg)


class NoopCipher:
    """不加密（加密由宿主应用注入）."""

    def encrypt(self, plain: str) -> str:
        return plain
