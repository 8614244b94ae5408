"""
tests/test_profile_routes.py -- Integration tests for /api/v1/profile routes.

Coverage:
  - POST /profile: create, update in place, skills normalization, wire aliases
  - GET /profile/me: 404 before a profile exists
  - GET /profile and GET /profile/user/{id}: public, embed owner name/avatar
  - experience / education: prepend order, removal keeps order, 404s
  - DELETE /profile: posts, profile and identity removed; a failed identity
    delete leaves a retryable account
  - out-of-range path ids and wrongly typed fields are 400, never 500
"""

from __future__ import annotations

import pytest
from conftest import auth, identity_id, register
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

PROFILE = {"status": "Developer", "skills": "python, sql , go,python,  "}


@pytest.fixture
def token(client: TestClient) -> str:
    return register(client, "Ada Lovelace", "ada@example.com")


def _create_profile(client: TestClient, token: str, **extra) -> dict:
    resp = client.post("/api/v1/profile", json={**PROFILE, **extra}, headers=auth(token))
    assert resp.status_code == 200, resp.text
    return resp.json()


class TestUpsert:
    def test_requires_token(self, client: TestClient) -> None:
        resp = client.post("/api/v1/profile", json=PROFILE)
        assert resp.status_code == 401

    def test_create(self, client: TestClient, token: str) -> None:
        data = _create_profile(client, token, githubusername="ada", twitter="https://twitter.com/ada")
        assert data["status"] == "Developer"
        assert data["skills"] == ["python", "sql", "go"]
        assert data["githubusername"] == "ada"
        assert data["social"]["twitter"] == "https://twitter.com/ada"
        assert data["social"]["youtube"] is None
        assert data["user"]["name"] == "Ada Lovelace"
        assert data["user"]["id"] == identity_id(client, token)
        assert data["experience"] == [] and data["education"] == []

    def test_update_keeps_identity_and_subcollections(self, client: TestClient, token: str) -> None:
        first = _create_profile(client, token, bio="first bio", company="Acme", twitter="https://twitter.com/ada")
        client.put(
            "/api/v1/profile/experience",
            json={"title": "Dev", "company": "Acme", "from": "2019-01-01"},
            headers=auth(token),
        )
        second = _create_profile(client, token, status="Lead", skills=["rust"], company="Initech")
        assert second["id"] == first["id"]
        assert second["status"] == "Lead"
        assert second["skills"] == ["rust"]
        assert second["company"] == "Initech"
        # Fields left out of the update keep their stored values
        assert second["bio"] == "first bio"
        assert second["social"]["twitter"] == "https://twitter.com/ada"
        assert [e["title"] for e in second["experience"]] == ["Dev"]
        assert len(client.get("/api/v1/profile").json()) == 1

    def test_missing_fields(self, client: TestClient, token: str) -> None:
        resp = client.post("/api/v1/profile", json={"skills": " , "}, headers=auth(token))
        assert resp.status_code == 400
        params = {e["param"] for e in resp.json()["errors"]}
        assert params == {"status", "skills"}

    @pytest.mark.parametrize("skills", [None, 5, True])
    def test_skills_of_wrong_type(self, client: TestClient, token: str, skills) -> None:
        resp = client.post("/api/v1/profile", json={"status": "Dev", "skills": skills}, headers=auth(token))
        assert resp.status_code == 400
        assert [e["param"] for e in resp.json()["errors"]] == ["skills"]


class TestRead:
    def test_me_without_profile(self, client: TestClient, token: str) -> None:
        resp = client.get("/api/v1/profile/me", headers=auth(token))
        assert resp.status_code == 404
        assert resp.json() == {"msg": "There is no profile for this user."}

    def test_me(self, client: TestClient, token: str) -> None:
        created = _create_profile(client, token)
        assert client.get("/api/v1/profile/me", headers=auth(token)).json() == created

    def test_public_list_and_by_user(self, client: TestClient, token: str) -> None:
        _create_profile(client, token)
        other = register(client, "Grace", "grace@example.com")
        _create_profile(client, other, status="Admiral")

        listed = client.get("/api/v1/profile")
        assert listed.status_code == 200
        assert {p["user"]["name"] for p in listed.json()} == {"Ada Lovelace", "Grace"}

        grace_id = identity_id(client, other)
        one = client.get(f"/api/v1/profile/user/{grace_id}")
        assert one.status_code == 200
        assert one.json()["status"] == "Admiral"

    def test_by_user_not_found(self, client: TestClient) -> None:
        resp = client.get("/api/v1/profile/user/999")
        assert resp.status_code == 404
        assert resp.json() == {"msg": "Profile not found."}

    @pytest.mark.parametrize("user_id", ["0", "99999999999999999999999"])
    def test_by_user_id_out_of_range(self, client: TestClient, user_id: str) -> None:
        resp = client.get(f"/api/v1/profile/user/{user_id}")
        assert resp.status_code == 400
        assert resp.json()["errors"][0]["location"] == "path"


class TestExperience:
    def _add(self, client: TestClient, token: str, title: str) -> list[dict]:
        resp = client.put(
            "/api/v1/profile/experience",
            json={"title": title, "company": "Acme", "from": "2020-01-01", "current": True},
            headers=auth(token),
        )
        assert resp.status_code == 200, resp.text
        return resp.json()

    def test_without_profile(self, client: TestClient, token: str) -> None:
        resp = client.put(
            "/api/v1/profile/experience",
            json={"title": "Dev", "company": "Acme", "from": "2020-01-01"},
            headers=auth(token),
        )
        assert resp.status_code == 404

    def test_prepend_and_remove(self, client: TestClient, token: str) -> None:
        _create_profile(client, token)
        self._add(client, token, "first")
        self._add(client, token, "second")
        entries = self._add(client, token, "third")
        assert [e["title"] for e in entries] == ["third", "second", "first"]
        assert entries[0]["from"] == "2020-01-01"
        assert entries[0]["current"] is True

        resp = client.delete(f"/api/v1/profile/experience/{entries[1]['id']}", headers=auth(token))
        assert resp.status_code == 200
        assert [e["title"] for e in resp.json()] == ["third", "first"]

    def test_remove_unknown(self, client: TestClient, token: str) -> None:
        _create_profile(client, token)
        self._add(client, token, "only")
        resp = client.delete("/api/v1/profile/experience/nope", headers=auth(token))
        assert resp.status_code == 404
        me = client.get("/api/v1/profile/me", headers=auth(token)).json()
        assert len(me["experience"]) == 1

    def test_missing_required_fields(self, client: TestClient, token: str) -> None:
        _create_profile(client, token)
        resp = client.put("/api/v1/profile/experience", json={"title": "Dev"}, headers=auth(token))
        assert resp.status_code == 400
        params = {e["param"] for e in resp.json()["errors"]}
        assert {"company", "from"} <= params


class TestEducation:
    BODY = {"school": "MIT", "degree": "BSc", "fieldofstudy": "CS", "from": "2010-09-01", "to": "2014-06-01"}

    def test_add_and_remove(self, client: TestClient, token: str) -> None:
        _create_profile(client, token)
        added = client.put("/api/v1/profile/education", json=self.BODY, headers=auth(token))
        assert added.status_code == 200
        entry = added.json()[0]
        assert entry["fieldofstudy"] == "CS"
        assert entry["to"] == "2014-06-01"

        removed = client.delete(f"/api/v1/profile/education/{entry['id']}", headers=auth(token))
        assert removed.status_code == 200
        assert removed.json() == []

    def test_entries_are_per_profile(self, client: TestClient, token: str) -> None:
        _create_profile(client, token)
        entry = client.put("/api/v1/profile/education", json=self.BODY, headers=auth(token)).json()[0]

        other = register(client, "Grace", "grace@example.com")
        _create_profile(client, other)
        resp = client.delete(f"/api/v1/profile/education/{entry['id']}", headers=auth(other))
        assert resp.status_code == 404
        me = client.get("/api/v1/profile/me", headers=auth(token)).json()
        assert len(me["education"]) == 1


class TestDeleteAccount:
    def test_cascade(self, client: TestClient, token: str) -> None:
        _create_profile(client, token)
        client.post("/api/v1/posts", json={"text": "mine"}, headers=auth(token))

        other = register(client, "Grace", "grace@example.com")
        theirs = client.post("/api/v1/posts", json={"text": "theirs"}, headers=auth(other)).json()
        client.post(f"/api/v1/posts/comment/{theirs['id']}", json={"text": "hi"}, headers=auth(token))
        ada_id = identity_id(client, token)

        resp = client.delete("/api/v1/profile", headers=auth(token))
        assert resp.status_code == 200
        assert resp.json() == {"msg": "User removed."}

        assert client.get(f"/api/v1/profile/user/{ada_id}").status_code == 404
        posts = client.get("/api/v1/posts", headers=auth(other)).json()
        assert [p["text"] for p in posts] == ["theirs"]
        # Comments left on other people's posts survive
        assert [c["user"] for c in posts[0]["comments"]] == [ada_id]
        login = client.post("/api/v1/auth", json={"email": "ada@example.com", "password": "secret123"})
        assert login.status_code == 401

    def test_failed_identity_delete_can_be_repeated(self, client: TestClient, token: str, monkeypatch) -> None:
        _create_profile(client, token)
        client.post("/api/v1/posts", json={"text": "mine"}, headers=auth(token))
        identities = client.app.state.identity_store

        def broken_delete(identity_id: int) -> bool:
            raise OperationalError("DELETE", {}, Exception("database is locked"))

        monkeypatch.setattr(identities, "delete_identity", broken_delete)
        assert client.delete("/api/v1/profile", headers=auth(token)).status_code == 500
        # Content is gone as a unit; the account still authenticates
        assert client.get("/api/v1/profile/me", headers=auth(token)).status_code == 404
        assert client.get("/api/v1/posts", headers=auth(token)).json() == []
        assert client.get("/api/v1/auth", headers=auth(token)).status_code == 200

        monkeypatch.undo()
        assert client.delete("/api/v1/profile", headers=auth(token)).status_code == 200
        assert client.get("/api/v1/auth", headers=auth(token)).status_code == 404
