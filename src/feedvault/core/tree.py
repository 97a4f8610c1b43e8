"""账户树结构与遍历."""

from collections.abc import Iterator, Sequence
from enum import Enum
from typing import Any, Protocol


class NodeKind(str, Enum):
    """树节点类型."""

    ROOT = "root"
    CATEGORY = "category"
    FEED = "feed"


class TreeNode(Protocol):
    """账户树节点（由导入方实现）."""

    kind: NodeKind
    title: str
    custom_id: int
    icon: Any
    update_type: int
    update_interval: int

    def children(self) -> Sequence["TreeNode"]: ...

    def assign_id(self, stored_id: int) -> None: ...


def walk_post_order(
    root: TreeNode, parent: TreeNode | None = None
) -> Iterator[tuple[TreeNode | None, TreeNode]]:
    """后序遍历，产出 (父节点, 节点)；根节点本身不产出."""
    stack: list[tuple[TreeNode | None, TreeNode, bool]] = [(parent, root, False)]

    while stack:
        node_parent, node, expanded = stack.pop()
        if expanded:
            if node is not root:
                yield node_parent, node
            continue

        stack.append((node_parent, node, True))
        for child in reversed(node.children()):
            stack.append((node, child, False))
