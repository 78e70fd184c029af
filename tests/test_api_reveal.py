"""Tests for the health and reveal endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from cardreveal.api import reveal as reveal_api
from cardreveal.main import app


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestHealthEndpoint:
    async def test_health_returns_healthy(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestResolveEndpoint:
    async def test_resolves_pool(self, client: AsyncClient) -> None:
        response = await client.post(
            "/reveal/resolve",
            json={
                "awardedCard": {"_id": "b", "name": "Ocean", "designType": "gradient"},
                "candidatePool": ["a", {"_id": "b"}, "c"],
                "catalog": [{"_id": "a", "name": "Amber"}],
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["outcome"] == "success"
        assert body["data"]["awardedIndex"] == 1
        assert body["data"]["failClosed"] is False
        assert [e["_id"] for e in body["data"]["entries"]] == ["a", "b", "c"]
        assert body["data"]["entries"][0]["name"] == "Amber"
        assert body["data"]["entries"][1] == {"_id": "b", "name": "Ocean", "designType": "gradient"}

    async def test_appends_awarded_card(self, client: AsyncClient) -> None:
        response = await client.post(
            "/reveal/resolve",
            json={"awardedCard": {"_id": "z", "name": "Bonus"}, "candidatePool": ["a", "b"]},
        )

        body = response.json()
        assert body["data"]["awardedIndex"] == 2
        assert body["data"]["entries"][2]["name"] == "Bonus"

    async def test_missing_awarded_card_is_refused(self, client: AsyncClient) -> None:
        response = await client.post("/reveal/resolve", json={"candidatePool": ["a"]})

        body = response.json()
        assert body["outcome"] == "refusal"
        assert body["failure"]["kind"] == "missing_required"
        assert body["data"] is None

    async def test_awarded_card_without_id_is_known_failure(self, client: AsyncClient) -> None:
        response = await client.post(
            "/reveal/resolve",
            json={"awardedCard": {"name": "Nameless"}, "candidatePool": ["a"]},
        )

        body = response.json()
        assert body["outcome"] == "known_failure"
        assert body["failure"]["kind"] == "invalid_input"
        assert body["failure"]["detail"] == "awarded_card_without_id"

    async def test_unexpected_error_is_classified(self, client: AsyncClient, monkeypatch) -> None:
        def broken(*_args, **_kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(reveal_api, "resolve_pool", broken)

        response = await client.post(
            "/reveal/resolve",
            json={"awardedCard": {"_id": "b"}},
        )

        body = response.json()
        assert response.status_code == 200
        assert body["outcome"] == "unknown_failure"
        assert body["failure"]["detail"] == "RuntimeError"
