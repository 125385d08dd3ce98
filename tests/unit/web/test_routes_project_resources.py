"""Tests for craftshare.web.routes.project_resources - commit/adjust/release routes."""

from __future__ import annotations

import pytest
from sqlalchemy import select

from craftshare.db.models import MaterialModel, ProjectMaterialModel
from craftshare.web.routes import project_resources


@pytest.fixture
def client(make_client):
    return make_client(project_resources.router)


async def _material_state(session_factory, material_id: int) -> tuple[int, list[int]]:
    async with session_factory() as session:
        stock = (
            await session.execute(
                select(MaterialModel.quantity).where(MaterialModel.id == material_id)
            )
        ).scalar_one()
        bindings = (
            await session.execute(
                select(ProjectMaterialModel.quantity_used).where(
                    ProjectMaterialModel.material_id == material_id
                )
            )
        ).scalars().all()
    return stock, list(bindings)


class TestCommit:
    """Tests for POST /api/projects/{id}/resources/{kind}/{resource_id}."""

    @pytest.mark.asyncio
    async def test_commit_twice_accumulates(self, client, seeded, session_factory):
        url = f"/api/projects/{seeded.project_id}/resources/material/{seeded.material_id}"

        first = await client.post(url, json={"quantity_used": 4})
        assert first.status_code == 200
        assert first.json()["quantity_used"] == 4
        assert first.json()["stock_remaining"] == 6

        second = await client.post(url, json={"quantity_used": 3})
        assert second.status_code == 200
        data = second.json()
        assert data["id"] == first.json()["id"]
        assert data["quantity_used"] == 7
        assert data["kind"] == "material"

        assert await _material_state(session_factory, seeded.material_id) == (3, [7])

    @pytest.mark.asyncio
    async def test_insufficient_stock_returns_400_and_rolls_back(
        self, client, seeded, session_factory
    ):
        await client.post(
            f"/api/projects/{seeded.project_id}/resources/material/{seeded.material_id}",
            json={"quantity_used": 7},
        )

        response = await client.post(
            f"/api/projects/{seeded.other_project_id}/resources/material/{seeded.material_id}",
            json={"quantity_used": 5},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "insufficient_stock"
        assert await _material_state(session_factory, seeded.material_id) == (3, [7])

    @pytest.mark.asyncio
    async def test_zero_quantity_is_invalid(self, client, seeded):
        response = await client.post(
            f"/api/projects/{seeded.project_id}/resources/material/{seeded.material_id}",
            json={"quantity_used": 0},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_quantity"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{"quantity_used": "abc"}, {"quantity_used": 2.5}, {}])
    async def test_malformed_quantity_is_invalid_quantity(
        self, client, seeded, session_factory, body
    ):
        url = f"/api/projects/{seeded.project_id}/resources/material/{seeded.material_id}"

        response = await client.post(url, json=body)

        assert response.status_code == 400
        assert response.json() == {
            "error": "invalid_quantity",
            "message": "Quantity must be an integer",
        }
        assert await _material_state(session_factory, seeded.material_id) == (10, [])

    @pytest.mark.asyncio
    async def test_malformed_adjust_quantity_is_invalid_quantity(self, client, seeded):
        url = f"/api/projects/{seeded.project_id}/resources/material/{seeded.material_id}"
        await client.post(url, json={"quantity_used": 2})

        response = await client.put(url, json={"quantity_used": "lots"})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_quantity"

    @pytest.mark.asyncio
    async def test_missing_project_is_404(self, client, seeded):
        response = await client.post(
            f"/api/projects/999/resources/tool/{seeded.tool_id}",
            json={"quantity_used": 1},
        )

        assert response.status_code == 404
        assert response.json() == {"error": "not_found", "message": "Project 999 not found"}

    @pytest.mark.asyncio
    async def test_unknown_kind_is_rejected(self, client, seeded):
        response = await client.post(
            f"/api/projects/{seeded.project_id}/resources/fabric/1",
            json={"quantity_used": 1},
        )

        assert response.status_code == 422


class TestAdjustAndRelease:
    """Tests for PUT and DELETE on a project resource."""

    @pytest.mark.asyncio
    async def test_adjust_returns_difference(self, client, seeded, session_factory):
        url = f"/api/projects/{seeded.project_id}/resources/material/{seeded.material_id}"
        await client.post(url, json={"quantity_used": 7})

        response = await client.put(url, json={"quantity_used": 2})

        assert response.status_code == 200
        assert response.json()["quantity_used"] == 2
        assert await _material_state(session_factory, seeded.material_id) == (8, [2])

    @pytest.mark.asyncio
    async def test_adjust_without_binding_is_404(self, client, seeded):
        response = await client.put(
            f"/api/projects/{seeded.project_id}/resources/material/{seeded.material_id}",
            json={"quantity_used": 2},
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_release_restores_stock(self, client, seeded, session_factory):
        url = f"/api/projects/{seeded.project_id}/resources/material/{seeded.material_id}"
        await client.post(url, json={"quantity_used": 6})

        response = await client.delete(url)

        assert response.status_code == 200
        assert response.json() == {
            "message": "Project material deleted successfully",
            "released": 6,
        }
        assert await _material_state(session_factory, seeded.material_id) == (10, [])


class TestReads:
    """Tests for project resource lists, cost and user stock."""

    @pytest.mark.asyncio
    async def test_list_cost_and_stock(self, client, seeded):
        await client.post(
            f"/api/projects/{seeded.project_id}/resources/material/{seeded.material_id}",
            json={"quantity_used": 4},
        )
        await client.post(
            f"/api/projects/{seeded.project_id}/resources/tool/{seeded.tool_id}",
            json={"quantity_used": 1},
        )

        listed = await client.get(f"/api/projects/{seeded.project_id}/resources/material")
        assert listed.status_code == 200
        assert listed.json() == [
            {
                "resource_id": seeded.material_id,
                "name": "Merino Yarn",
                "cost": 4.5,
                "user_id": seeded.owner_id,
                "quantity_used": 4,
            }
        ]

        cost = await client.get(f"/api/projects/{seeded.project_id}/cost")
        assert cost.json() == {
            "project_id": seeded.project_id,
            "materials": 18.0,
            "tools": 85.0,
            "total": 103.0,
        }

        stock = await client.get(f"/api/users/{seeded.owner_id}/stock/tool")
        assert stock.json()[0]["on_hand"] == 1
        assert stock.json()[0]["committed"] == 1
        assert stock.json()[0]["total_owned"] == 2

    @pytest.mark.asyncio
    async def test_list_for_missing_project_is_404(self, client, seeded):
        response = await client.get("/api/projects/999/resources/tool")

        assert response.status_code == 404
