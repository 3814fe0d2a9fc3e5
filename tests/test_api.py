"""Tests for the HTTP surface of the gateway."""

from photoshare.core.errors import StoreUnavailable

POST_PHOTO = """
mutation post($input: PostPhotoInput!) {
  postPhoto(input: $input) { name category postedBy { githubLogin } }
}
"""


def test_welcome_and_health(client) -> None:
    welcome = client.get("/")
    health = client.get("/health")

    assert welcome.status_code == 200
    assert welcome.text == "Welcome to the PhotoShare API"
    assert health.json() == {"status": "ok"}


def test_query_over_http(client) -> None:
    response = client.post("/graphql", json={"query": "{ totalPhotos allPhotos { name } }"})

    assert response.status_code == 200
    assert response.json() == {
        "data": {
            "totalPhotos": 3,
            "allPhotos": [{"name": "Sunrise"}, {"name": "Selfie"}, {"name": "Race"}],
        }
    }


def test_authorization_header_identifies_user(client) -> None:
    query = {"query": "query Me { me { githubLogin name } }", "operationName": "Me"}

    anonymous = client.post("/graphql", json=query)
    signed_in = client.post("/graphql", json=query, headers={"Authorization": "carol-token"})

    assert anonymous.json() == {"data": {"me": None}}
    assert signed_in.json() == {"data": {"me": {"githubLogin": "carol", "name": "Carol"}}}


def test_post_photo_over_http(client) -> None:
    body = {"query": POST_PHOTO, "variables": {"input": {"name": "Pier", "category": "ACTION"}}}

    denied = client.post("/graphql", json=body)
    posted = client.post("/graphql", json=body, headers={"Authorization": "alice-token"})
    total = client.post("/graphql", json={"query": "{ totalPhotos }"})

    assert denied.status_code == 200
    assert denied.json()["errors"][0]["extensions"]["code"] == "UNAUTHORIZED"
    assert posted.json() == {
        "data": {
            "postPhoto": {"name": "Pier", "category": "ACTION", "postedBy": {"githubLogin": "alice"}}
        }
    }
    assert total.json() == {"data": {"totalPhotos": 4}}


def test_rejected_documents_return_400(client) -> None:
    too_costly = "{ allUsers { postedPhotos { taggedUsers { name githubLogin } } } }"

    unknown = client.post("/graphql", json={"query": "{ allPhotos { nope } }"})
    costly = client.post("/graphql", json={"query": too_costly})

    assert unknown.status_code == 400
    assert "data" not in unknown.json()
    assert unknown.json()["errors"][0]["extensions"] == {"code": "VALIDATION_REJECTED"}
    assert costly.status_code == 400
    assert costly.json()["errors"] == [
        {
            "message": "The query exceeds the maximum cost of 1000. Actual cost is 2000",
            "extensions": {"code": "VALIDATION_REJECTED"},
        }
    ]


def test_store_outage_returns_503(client, seeded_store, monkeypatch) -> None:
    async def unavailable(filter):  # type: ignore[no-untyped-def]
        raise StoreUnavailable("find_one", "connection refused")

    monkeypatch.setattr(seeded_store.users, "find_one", unavailable)

    response = client.post(
        "/graphql", json={"query": "{ totalPhotos }"}, headers={"Authorization": "alice-token"}
    )

    assert response.status_code == 503
    assert response.json()["errors"][0]["extensions"] == {"code": "STORE_UNAVAILABLE"}


def test_playground_page(client) -> None:
    response = client.get("/playground")

    assert response.status_code == 200
    assert "graphiql" in response.text
    assert 'url: "/graphql"' in response.text


def test_cors_preflight(client) -> None:
    response = client.options(
        "/graphql",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_shutdown_closes_clients(gateway, identity_provider) -> None:
    from fastapi.testclient import TestClient

    with TestClient(gateway.app) as test_client:
        assert test_client.get("/health").status_code == 200
        assert not identity_provider.closed

    assert identity_provider.closed
