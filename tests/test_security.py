from datetime import timedelta
import pytest
from socialfeed.core.errors import AuthError
from socialfeed.core.security import (
    create_access_token,
    hash_password,
    verify_password,
    verify_token,
)


def test_password_hashing():
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)


def test_verify_token_roundtrip():
    token = create_access_token({"sub": "42", "username": "alice"})
    data = verify_token(token)
    assert data.user_id == 42
    assert data.username == "alice"


@pytest.mark.parametrize(
    "token",
    [
        "not-a-jwt",
        create_access_token({"sub": "1"}, expires_delta=timedelta(seconds=-10)),
        create_access_token({"username": "alice"}),
        create_access_token({"sub": "abc"}),
    ],
    ids=["garbage", "expired", "no-subject", "non-numeric-subject"],
)
def test_verify_token_rejects(token):
    with pytest.raises(AuthError) as exc:
        verify_token(token)
    assert exc.value.status_code == 401


def test_protected_route_without_token(client):
    response = client.get("/api/posts")
    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated"}


def test_protected_route_with_bad_token(client):
    response = client.get("/api/posts", headers={"Authorization": "Bearer nonsense"})
    assert response.status_code == 401
    assert response.json() == {"error": "Could not validate credentials"}


def test_token_outliving_its_account(client, register):
    headers, _ = register("alice")
    assert client.delete("/api/users/account", headers=headers).status_code == 200

    response = client.get("/api/posts", headers=headers)
    assert response.status_code == 401
    assert response.json() == {"error": "User not found"}
