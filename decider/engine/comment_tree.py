from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable


@dataclass
class CommentNode:
    comment: Any
    replies: list["CommentNode"] = field(default_factory=list)


def build_comment_tree(comments: Iterable[Any]) -> list[CommentNode]:
    """Weave a flat comment list into threads.

    Builds fresh nodes on every call and never touches the inputs. Input
    order is kept at every level. A reply whose parent is absent becomes
    a root.
    """
    comments = list(comments)
    nodes = {c.id: CommentNode(c) for c in comments}

    roots: list[CommentNode] = []
    for c in comments:
        node = nodes[c.id]
        parent = nodes.get(c.parent_id) if c.parent_id is not None else None
        if parent is None or parent is node:
            roots.append(node)
        else:
            parent.replies.append(node)
    return roots
