import pytest
from sqlalchemy.exc import IntegrityError
from socialfeed.crud.toggles import insert_edge, toggle_edge
from socialfeed.db.models.like import Like
from socialfeed.db.models.post import Post
from socialfeed.db.models.user import User


def test_like_toggles(client, register, make_post):
    alice, _ = register("alice")
    bob, _ = register("bob")
    post_id = make_post(alice)

    first = client.post(f"/api/posts/{post_id}/like", headers=bob).json()
    assert first == {"message": "Post liked", "liked": True, "likes_count": 1}

    second = client.post(f"/api/posts/{post_id}/like", headers=bob).json()
    assert second == {"message": "Post unliked", "liked": False, "likes_count": 0}


def test_like_missing_post(client, register):
    alice, _ = register("alice")
    response = client.post("/api/posts/999/like", headers=alice)
    assert response.status_code == 404
    assert response.json() == {"error": "Post not found"}


def test_comments_are_oldest_first(client, register, make_post):
    alice, _ = register("alice", "Alice A")
    bob, _ = register("bob")
    post_id = make_post(alice)

    for headers, text in ((bob, "first"), (alice, "second"), (bob, "third")):
        response = client.post(f"/api/posts/{post_id}/comments", json={"content": text}, headers=headers)
        assert response.status_code == 201
        assert response.json()["message"] == "Comment added successfully"

    comments = client.get(f"/api/posts/{post_id}/comments", headers=alice).json()
    assert [c["content"] for c in comments] == ["first", "second", "third"]
    assert comments[1]["username"] == "alice"
    assert comments[1]["full_name"] == "Alice A"

    feed = client.get("/api/posts", headers=alice).json()
    assert feed[0]["comments_count"] == 3


def test_comment_requires_content(client, register, make_post):
    alice, _ = register("alice")
    post_id = make_post(alice)
    for body in ({}, {"content": ""}, {"content": "   "}):
        response = client.post(f"/api/posts/{post_id}/comments", json=body, headers=alice)
        assert response.status_code == 400
        assert response.json() == {"error": "Comment content is required"}


def test_comment_on_missing_post(client, register):
    alice, _ = register("alice")
    response = client.post("/api/posts/999/comments", json={"content": "hi"}, headers=alice)
    assert response.status_code == 404


def test_comments_for_post_without_any(client, register, make_post):
    alice, _ = register("alice")
    post_id = make_post(alice)
    assert client.get(f"/api/posts/{post_id}/comments", headers=alice).json() == []


@pytest.fixture
def post_and_user(db):
    user = User(username="dana", email="dana@mail.com", password="x")
    db.add(user)
    db.commit()
    post = Post(user_id=user.id, content="hi")
    db.add(post)
    db.commit()
    return post.id, user.id


def test_insert_edge_treats_duplicate_as_present(db, post_and_user):
    post_id, user_id = post_and_user
    assert insert_edge(db, Like, post_id=post_id, user_id=user_id) is True
    # second insert trips the unique constraint and is reported as already liked
    assert insert_edge(db, Like, post_id=post_id, user_id=user_id) is True
    assert db.query(Like).count() == 1


def test_insert_edge_reraises_other_integrity_errors(db, post_and_user):
    _, user_id = post_and_user
    with pytest.raises(IntegrityError):
        insert_edge(db, Like, post_id=999, user_id=user_id)
    assert db.query(Like).count() == 0


def test_toggle_edge_flips(db, post_and_user):
    post_id, user_id = post_and_user
    assert toggle_edge(db, Like, post_id=post_id, user_id=user_id) is True
    assert toggle_edge(db, Like, post_id=post_id, user_id=user_id) is False
    assert toggle_edge(db, Like, post_id=post_id, user_id=user_id) is True
    assert db.query(Like).count() == 1
