import copy
from dataclasses import replace
from datetime import datetime, timezone

from leetboard.domain import Comment, CommentNode, Post, PostComments, User


def test_comment_defaults_to_top_level():
    comment = Comment(content="hello")
    assert comment.parent_comment_id == 0
    assert comment.created_at is None
    assert comment.content == "hello"


def test_node_reads_fields_of_wrapped_comment():
    node = CommentNode(Comment(id=7, user_name="anon", content="hi"))
    assert node.id == 7
    assert node.user_name == "anon"
    assert node.content == "hi"


def test_node_unknown_attribute_is_missing():
    node = CommentNode(Comment())
    assert not hasattr(node, "does_not_exist")
    assert getattr(node, "does_not_exist", "missing") == "missing"


def test_node_replies_are_not_shared():
    first = CommentNode(Comment(id=1))
    second = CommentNode(Comment(id=2))
    first.replies.append(second)
    assert first.replies == [second]
    assert second.replies == []


def test_node_deep_copy_is_equal():
    root = CommentNode(Comment(id=1, content="root"))
    root.replies.append(CommentNode(Comment(id=2, parent_comment_id=1)))
    clone = copy.deepcopy(root)
    assert clone == root
    assert clone.replies[0].parent_comment_id == 1


def test_post_is_active_until_archived():
    post = Post(id=3, title="Hello", content="World")
    assert post.archived_at is None
    moment = datetime(2024, 1, 1, tzinfo=timezone.utc)
    archived = replace(post, archived_at=moment)
    assert archived.archived_at == moment
    assert archived.title == post.title


def test_post_comments_lists_are_independent():
    one = PostComments(Post(id=1))
    two = PostComments(Post(id=2))
    one.comments.append(Comment(id=1, content="First comment"))
    assert len(one.comments) == 1
    assert two.comments == []


def test_user_equality_by_value():
    expires = datetime(2030, 5, 1, tzinfo=timezone.utc)
    user = User(id="123", name="Rick Sanchez", avatar="portal.png", expires_at=expires)
    assert user == User("123", "Rick Sanchez", "portal.png", expires)
    assert replace(user, name="Morty") != user