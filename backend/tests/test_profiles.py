"""Tests for the profile API routes."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.models.profile import Profile, ProfileRole


class TestMyProfile:
    @pytest.mark.asyncio
    async def test_profile_created_on_first_request(self, client: AsyncClient, auth_headers, session_maker):
        response = await client.get("/api/profile", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == "test-user"
        assert data["role"] == "patient"
        assert data["full_name"] == "Test User"

        async with session_maker() as session:
            profile = await session.get(Profile, "test-user")
        assert profile is not None

    @pytest.mark.asyncio
    async def test_update_full_name(self, client: AsyncClient, auth_headers):
        response = await client.patch("/api/profile", json={"full_name": "Jordan"}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["full_name"] == "Jordan"

        again = await client.get("/api/profile", headers=auth_headers)
        assert again.json()["full_name"] == "Jordan"

    @pytest.mark.asyncio
    async def test_role_cannot_be_self_assigned(self, client: AsyncClient, auth_headers, session_maker):
        response = await client.patch(
            "/api/profile",
            json={"full_name": "Jordan", "role": "admin"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["role"] == "patient"
        async with session_maker() as session:
            role = (await session.execute(select(Profile.role).where(Profile.id == "test-user"))).scalar_one()
        assert role == ProfileRole.PATIENT

    @pytest.mark.asyncio
    async def test_requires_auth(self, anon_client: AsyncClient):
        response = await anon_client.get("/api/profile")
        assert response.status_code == 401


class TestListProfiles:
    @pytest.mark.asyncio
    async def test_admin_lists_profiles(self, client: AsyncClient, auth_headers, login_as):
        login_as("admin-user")
        response = await client.get("/api/profiles", headers=auth_headers)

        assert response.status_code == 200
        ids = {p["id"] for p in response.json()}
        assert {"admin-user", "other-user"} <= ids

    @pytest.mark.asyncio
    async def test_patient_forbidden(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/profiles", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["detail"] == "Admin role required"
