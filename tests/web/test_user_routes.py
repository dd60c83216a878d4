"""Profile and usage for the signed-in user."""


def test_me_returns_profile(client, auth_headers):
    data = client.get("/api/user/me", headers=auth_headers).json()
    assert data["id"] == "user-123"
    assert data["email"] == "test@example.com"
    assert data["name"] == "Test"
    assert data["createdAt"]
    assert data["lastSeenAt"]
    assert data["usage"] == {}


def test_me_counts_own_events_only(client, auth_headers, auth_headers_b, create_entry):
    create_entry()
    create_entry()
    create_entry(headers=auth_headers_b)

    mine = client.get("/api/user/me", headers=auth_headers).json()
    theirs = client.get("/api/user/me?days=7", headers=auth_headers_b).json()
    assert mine["usage"] == {"journal_entry_created": 2}
    assert theirs["usage"] == {"journal_entry_created": 1}


def test_me_requires_auth(client):
    assert client.get("/api/user/me").status_code == 401
