import pytest
from sqlalchemy.exc import OperationalError
from conftest import PASSWORD, PNG_BYTES
from socialfeed.crud import user as user_crud
from socialfeed.db.models.comment import Comment
from socialfeed.db.models.follow import Follow
from socialfeed.db.models.like import Like
from socialfeed.db.models.post import Post
from socialfeed.db.models.user import User


def test_profile_counts(client, register, make_post):
    alice, alice_user = register("alice", "Alice A")
    bob, bob_user = register("bob")
    make_post(alice, "one")
    make_post(alice, "two")
    client.post(f"/api/users/{alice_user['id']}/follow", headers=bob)
    client.post(f"/api/users/{bob_user['id']}/follow", headers=alice)

    profile = client.get(f"/api/users/{alice_user['id']}", headers=bob).json()
    assert profile["username"] == "alice"
    assert profile["full_name"] == "Alice A"
    assert profile["posts_count"] == 2
    assert profile["followers_count"] == 1
    assert profile["following_count"] == 1
    assert profile["is_following"] is True
    assert "email" not in profile


def test_profile_not_found(client, register):
    alice, _ = register("alice")
    response = client.get("/api/users/999", headers=alice)
    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


def test_update_profile_is_partial(client, register):
    alice, alice_user = register("alice", "Alice A")

    response = client.put("/api/users/profile", data={"bio": "Hello there"}, headers=alice)
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Profile updated successfully"
    assert data["user"]["bio"] == "Hello there"
    assert data["user"]["full_name"] == "Alice A"

    client.put("/api/users/profile", data={"full_name": "Alice B"}, headers=alice)
    profile = client.get(f"/api/users/{alice_user['id']}", headers=alice).json()
    assert profile["full_name"] == "Alice B"
    assert profile["bio"] == "Hello there"


def test_update_profile_picture(client, register):
    alice, _ = register("alice")
    response = client.put(
        "/api/users/profile",
        files={"profile_picture": ("me.png", PNG_BYTES, "image/png")},
        headers=alice,
    )
    assert response.status_code == 200
    picture = response.json()["user"]["profile_picture"]
    assert picture.startswith("/uploads/")
    assert client.get(picture).content == PNG_BYTES


def test_update_profile_rejects_non_image(client, register):
    alice, alice_user = register("alice")
    response = client.put(
        "/api/users/profile",
        data={"bio": "new"},
        files={"profile_picture": ("me.gif", b"GIF89a", "application/pdf")},
        headers=alice,
    )
    assert response.status_code == 400
    profile = client.get(f"/api/users/{alice_user['id']}", headers=alice).json()
    assert profile["bio"] is None


def test_delete_account_cascades(client, register, make_post, db):
    alice, alice_user = register("alice")
    bob, bob_user = register("bob")

    alice_post = make_post(alice, "by alice")
    bob_post = make_post(bob, "by bob")
    client.post(f"/api/posts/{bob_post}/like", headers=alice)
    client.post(f"/api/posts/{bob_post}/comments", json={"content": "from alice"}, headers=alice)
    client.post(f"/api/posts/{alice_post}/like", headers=bob)
    client.post(f"/api/posts/{alice_post}/comments", json={"content": "from bob"}, headers=bob)
    client.post(f"/api/users/{bob_user['id']}/follow", headers=alice)
    client.post(f"/api/users/{alice_user['id']}/follow", headers=bob)

    response = client.delete("/api/users/account", headers=alice)
    assert response.status_code == 200
    assert response.json() == {"message": "Account deleted successfully"}

    alice_id = alice_user["id"]
    assert db.query(User).filter(User.id == alice_id).count() == 0
    assert db.query(Post).filter(Post.user_id == alice_id).count() == 0
    assert db.query(Like).count() == 0
    assert db.query(Comment).count() == 0
    assert db.query(Follow).count() == 0

    # bob's side survives intact
    feed = client.get("/api/posts", headers=bob).json()
    assert [p["content"] for p in feed] == ["by bob"]
    assert feed[0]["likes_count"] == 0
    assert feed[0]["comments_count"] == 0
    profile = client.get(f"/api/users/{bob_user['id']}", headers=bob).json()
    assert profile["followers_count"] == 0
    assert profile["following_count"] == 0

    login = client.post("/api/login", json={"username": "alice", "password": PASSWORD})
    assert login.status_code == 401


def test_delete_account_is_all_or_nothing(client, register, make_post, db, fail_statement):
    alice, alice_user = register("alice")
    bob, bob_user = register("bob")
    alice_post = make_post(alice)
    client.post(f"/api/posts/{alice_post}/like", headers=bob)
    client.post(f"/api/posts/{alice_post}/comments", json={"content": "hi"}, headers=bob)
    client.post(f"/api/users/{bob_user['id']}/follow", headers=alice)

    # follows are removed after likes, comments and posts
    fail_statement("DELETE FROM follows")
    response = client.delete("/api/users/account", headers=alice)
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to delete account"}

    assert db.query(User).filter(User.id == alice_user["id"]).count() == 1
    assert db.query(Post).filter(Post.id == alice_post).count() == 1
    assert db.query(Like).count() == 1
    assert db.query(Comment).count() == 1
    assert db.query(Follow).count() == 1


def test_delete_account_crud_rolls_back(register, make_post, db, fail_statement):
    alice, alice_user = register("alice")
    make_post(alice)

    fail_statement("DELETE FROM users")
    with pytest.raises(OperationalError):
        user_crud.delete_account(db, alice_user["id"])
    assert db.query(Post).filter(Post.user_id == alice_user["id"]).count() == 1
    assert db.query(User).filter(User.id == alice_user["id"]).count() == 1
