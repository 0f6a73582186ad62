"""Integration tests for the tool gateway used by external agents."""

import pytest
from fastapi import FastAPI, status
from httpx import AsyncClient

from thinkarr.domain.tools.models import NoInput, PlexSearchInput
from thinkarr.infrastructure.database.models.user import User
from thinkarr.infrastructure.database.repositories.app_config import ConfigStore

GATEWAY_TOKEN = "gateway-secret-token"
BEARER = {"Authorization": f"Bearer {GATEWAY_TOKEN}"}


@pytest.fixture
async def gateway(app: FastAPI, config_store: ConfigStore) -> None:
    """Configure the gateway token and a small tool set."""
    await config_store.set("mcp.bearerToken", GATEWAY_TOKEN, encrypted=True)

    async def search(params: PlexSearchInput) -> list[dict]:
        return [{"title": params.query, "year": 1979}]

    async def delete_everything(params: NoInput) -> dict:
        return {"deleted": True}

    registry = app.state.tool_registry
    registry.register("plex_search_library", "Search.", PlexSearchInput, search)
    registry.register("radarr_delete_movie", "Delete.", NoInput, delete_everything)
    registry.mark_populated()


def tool_names(response) -> list[str]:
    return [t["function"]["name"] for t in response.json()["tools"]]


@pytest.mark.usefixtures("gateway")
class TestGatewayAuth:
    async def test_missing_token(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/mcp")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Unauthorized. Provide a valid Bearer token."

    async def test_wrong_token(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/mcp",
            json={"method": "list"},
            headers={"Authorization": "Bearer guess"},
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


async def test_gateway_disabled_without_configured_token(async_client: AsyncClient) -> None:
    response = await async_client.get("/api/mcp", headers=BEARER)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.usefixtures("gateway")
class TestGatewayListing:
    async def test_no_user_header_is_elevated(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/mcp", headers=BEARER)

        assert response.status_code == status.HTTP_200_OK
        assert tool_names(response) == ["plex_search_library", "radarr_delete_movie"]

    async def test_scoped_user_sees_allowed_tools(
        self,
        async_client: AsyncClient,
        test_user: User,
    ) -> None:
        response = await async_client.post(
            "/api/mcp",
            json={"method": "tools/list"},
            headers={**BEARER, "X-User-Id": str(test_user.id)},
        )

        assert response.status_code == status.HTTP_200_OK
        assert tool_names(response) == ["plex_search_library"]

    async def test_admin_user_sees_everything(
        self,
        async_client: AsyncClient,
        admin_user: User,
    ) -> None:
        response = await async_client.get(
            "/api/mcp", headers={**BEARER, "X-User-Id": str(admin_user.id)}
        )

        assert tool_names(response) == ["plex_search_library", "radarr_delete_movie"]


@pytest.mark.usefixtures("gateway")
class TestGatewayExecute:
    async def test_execute(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/mcp",
            json={
                "method": "execute",
                "tool": "plex_search_library",
                "arguments": {"query": "Alien"},
            },
            headers=BEARER,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "tool": "plex_search_library",
            "result": [{"title": "Alien", "year": 1979}],
        }

    async def test_tool_field_implies_execute(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/mcp",
            json={"tool": "plex_search_library", "arguments": '{"query": "Heat"}'},
            headers=BEARER,
        )

        assert response.json()["result"][0]["title"] == "Heat"

    async def test_tool_errors_are_results(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/mcp",
            json={"method": "tools/call", "tool": "plex_search_library", "arguments": {}},
            headers=BEARER,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["result"]["error"] == "Invalid arguments for plex_search_library"

    async def test_scoped_user_is_denied(
        self,
        async_client: AsyncClient,
        test_user: User,
    ) -> None:
        response = await async_client.post(
            "/api/mcp",
            json={"method": "execute", "tool": "radarr_delete_movie"},
            headers={**BEARER, "X-User-Id": str(test_user.id)},
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"] == (
            "Permission denied: user cannot execute radarr_delete_movie"
        )

    async def test_scoped_user_may_run_allowed_tool(
        self,
        async_client: AsyncClient,
        test_user: User,
    ) -> None:
        response = await async_client.post(
            "/api/mcp",
            json={"method": "execute", "tool": "plex_search_library", "arguments": {"query": "x"}},
            headers={**BEARER, "X-User-Id": str(test_user.id)},
        )

        assert response.status_code == status.HTTP_200_OK

    async def test_unknown_method(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/mcp", json={"method": "resources/list"}, headers=BEARER
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    async def test_execute_requires_tool_name(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/api/mcp", json={"method": "execute"}, headers=BEARER)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "tool name is required"
