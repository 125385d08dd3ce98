"""Tests for craftshare.web.routes.inventory - owner stock management."""

from __future__ import annotations

import pytest

from craftshare.web.routes import inventory, project_resources


@pytest.fixture
def client(make_client):
    return make_client(inventory.router, project_resources.router)


@pytest.mark.asyncio
async def test_add_and_list_materials(client, seeded):
    response = await client.post(
        f"/api/users/{seeded.helper_id}/resources/material",
        json={"name": "Stoneware Clay", "quantity": 25, "cost": "1.20"},
    )

    assert response.status_code == 201
    assert response.json()["quantity"] == 25

    listed = await client.get(f"/api/users/{seeded.helper_id}/resources/material")
    assert [r["name"] for r in listed.json()] == ["Stoneware Clay"]


@pytest.mark.asyncio
async def test_duplicate_name_is_409(client, seeded):
    response = await client.post(
        f"/api/users/{seeded.owner_id}/resources/tool",
        json={"name": "Table Loom", "quantity": 1},
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_negative_quantity_is_422(client, seeded):
    response = await client.post(
        f"/api/users/{seeded.owner_id}/resources/material",
        json={"name": "Linen", "quantity": -1},
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_owner_restocks_with_patch(client, seeded):
    response = await client.patch(
        f"/api/resources/material/{seeded.material_id}", json={"quantity": 15}
    )

    assert response.status_code == 200
    assert response.json()["quantity"] == 15
    assert response.json()["name"] == "Merino Yarn"


@pytest.mark.asyncio
async def test_delete_committed_resource_is_409(client, seeded):
    await client.post(
        f"/api/projects/{seeded.project_id}/resources/tool/{seeded.tool_id}",
        json={"quantity_used": 1},
    )

    blocked = await client.delete(f"/api/resources/tool/{seeded.tool_id}")
    assert blocked.status_code == 409

    await client.delete(f"/api/projects/{seeded.project_id}/resources/tool/{seeded.tool_id}")
    assert (await client.delete(f"/api/resources/tool/{seeded.tool_id}")).status_code == 204
    assert (await client.delete(f"/api/resources/tool/{seeded.tool_id}")).status_code == 404
