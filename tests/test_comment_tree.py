"""Tests for weaving flat comments into threads."""

import uuid
from types import SimpleNamespace

from decider.engine.comment_tree import build_comment_tree


def _comment(parent=None, body="") -> SimpleNamespace:
    return SimpleNamespace(id=uuid.uuid4(), parent_id=parent.id if parent else None, body=body)


class TestBuildCommentTree:
    def test_nests_replies_under_parents(self) -> None:
        root = _comment(body="root")
        reply = _comment(root, "reply")
        nested = _comment(reply, "nested")
        other = _comment(body="other")

        tree = build_comment_tree([root, reply, other, nested])

        assert [n.comment.body for n in tree] == ["root", "other"]
        assert [n.comment.body for n in tree[0].replies] == ["reply"]
        assert [n.comment.body for n in tree[0].replies[0].replies] == ["nested"]

    def test_keeps_input_order_among_siblings(self) -> None:
        root = _comment()
        first, second = _comment(root, "first"), _comment(root, "second")
        tree = build_comment_tree([root, first, second])
        assert [n.comment.body for n in tree[0].replies] == ["first", "second"]

    def test_orphan_reply_becomes_root(self) -> None:
        missing = _comment()
        orphan = _comment(missing, "orphan")
        tree = build_comment_tree([orphan])
        assert [n.comment.body for n in tree] == ["orphan"]

    def test_fresh_nodes_each_call(self) -> None:
        root = _comment()
        comments = [root, _comment(root)]
        first = build_comment_tree(comments)
        second = build_comment_tree(comments)
        assert first[0] is not second[0]
        assert len(first[0].replies) == len(second[0].replies) == 1

    def test_empty(self) -> None:
        assert build_comment_tree([]) == []
