"""Tests for the analyze-symptoms function endpoint.

Covers the HTTP contract: success body, fallback signalling, upstream
error statuses and bodies, validation, and CORS pre-flight.
"""

import pytest
from httpx import AsyncClient

from app.main import app
from app.routes.analysis import get_analysis_service
from app.services.analysis import SymptomAnalysisService

ENDPOINT = "/functions/analyze-symptoms"


@pytest.fixture
def use_analyzer():
    """Replace the analysis service used by the endpoint."""

    def _use(service: SymptomAnalysisService) -> None:
        async def override():
            yield service

        app.dependency_overrides[get_analysis_service] = override

    return _use


class TestAnalyzeSymptomsSuccess:
    """Tests for successful analysis responses."""

    @pytest.mark.asyncio
    async def test_returns_parsed_analysis(self, client: AsyncClient, auth_headers, valid_analysis):
        response = await client.post(ENDPOINT, json={"symptoms": ["Fever", "Cough"]}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == valid_analysis
        assert "X-Analysis-Fallback" not in response.headers

    @pytest.mark.asyncio
    async def test_fallback_returns_200_with_header(
        self, client: AsyncClient, auth_headers, use_analyzer, openai_client_factory
    ):
        use_analyzer(SymptomAnalysisService(api_key="key", client=openai_client_factory("no json here")))

        response = await client.post(ENDPOINT, json={"symptoms": ["Fever"]}, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["riskLevel"] == "medium"
        assert data["conditions"][0]["name"] == "Multiple Symptoms"
        assert data["conditions"][0]["probability"] == 60
        assert response.headers["X-Analysis-Fallback"] == "true"

    @pytest.mark.asyncio
    async def test_deeply_nested_reply_falls_back(
        self, client: AsyncClient, auth_headers, use_analyzer, openai_client_factory
    ):
        use_analyzer(SymptomAnalysisService(api_key="key", client=openai_client_factory('{"a": ' * 5000)))

        response = await client.post(ENDPOINT, json={"symptoms": ["Fever"]}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["riskLevel"] == "medium"
        assert response.headers["X-Analysis-Fallback"] == "true"


class TestAnalyzeSymptomsErrors:
    """Tests for error status codes and bodies."""

    @pytest.mark.asyncio
    async def test_rate_limited(
        self, client: AsyncClient, auth_headers, use_analyzer, openai_client_factory, status_error
    ):
        use_analyzer(SymptomAnalysisService(api_key="key", client=openai_client_factory(error=status_error(429))))

        response = await client.post(ENDPOINT, json={"symptoms": ["Fever"]}, headers=auth_headers)

        assert response.status_code == 429
        assert response.json() == {"error": "Rate limit exceeded. Please try again later."}

    @pytest.mark.asyncio
    async def test_quota_exhausted(
        self, client: AsyncClient, auth_headers, use_analyzer, openai_client_factory, status_error
    ):
        use_analyzer(SymptomAnalysisService(api_key="key", client=openai_client_factory(error=status_error(402))))

        response = await client.post(ENDPOINT, json={"symptoms": ["Fever"]}, headers=auth_headers)

        assert response.status_code == 402
        assert response.json() == {"error": "AI credits exhausted. Please add credits to continue."}

    @pytest.mark.asyncio
    async def test_other_upstream_failure(
        self, client: AsyncClient, auth_headers, use_analyzer, openai_client_factory, status_error
    ):
        use_analyzer(SymptomAnalysisService(api_key="key", client=openai_client_factory(error=status_error(503))))

        response = await client.post(ENDPOINT, json={"symptoms": ["Fever"]}, headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {"error": "AI gateway error: 503"}

    @pytest.mark.asyncio
    async def test_missing_credential(self, client: AsyncClient, auth_headers, use_analyzer):
        use_analyzer(SymptomAnalysisService(api_key=""))

        response = await client.post(ENDPOINT, json={"symptoms": ["Fever"]}, headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {"error": "AI gateway API key is not configured"}

    @pytest.mark.asyncio
    async def test_unexpected_exception(
        self, client: AsyncClient, auth_headers, use_analyzer, openai_client_factory
    ):
        use_analyzer(
            SymptomAnalysisService(api_key="key", client=openai_client_factory(error=RuntimeError("boom")))
        )

        response = await client.post(ENDPOINT, json={"symptoms": ["Fever"]}, headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {"error": "boom"}

    @pytest.mark.asyncio
    async def test_empty_symptoms_rejected(self, client: AsyncClient, auth_headers, mock_openai_client):
        response = await client.post(ENDPOINT, json={"symptoms": []}, headers=auth_headers)

        assert response.status_code == 422
        body = response.json()
        assert set(body) == {"error"}
        assert body["error"].startswith("symptoms: ")
        mock_openai_client.chat.completions.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_symptoms_field(self, client: AsyncClient, auth_headers):
        response = await client.post(ENDPOINT, json={}, headers=auth_headers)

        assert response.status_code == 422
        assert response.json() == {"error": "symptoms: Field required"}

    @pytest.mark.asyncio
    async def test_malformed_json_body(self, client: AsyncClient, auth_headers):
        response = await client.post(
            ENDPOINT,
            content=b"{not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 422
        assert list(response.json()) == ["error"]

    @pytest.mark.asyncio
    async def test_requires_authentication(self, anon_client: AsyncClient):
        response = await anon_client.post(ENDPOINT, json={"symptoms": ["Fever"]})
        assert response.status_code == 401


class TestCors:
    """Tests for pre-flight handling."""

    @pytest.mark.asyncio
    async def test_plain_options_returns_empty_200(self, client: AsyncClient):
        response = await client.options(ENDPOINT)
        assert response.status_code == 200
        assert response.content == b""

    @pytest.mark.asyncio
    async def test_preflight_allows_any_origin(self, client: AsyncClient):
        response = await client.options(
            ENDPOINT,
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "authorization, apikey, content-type, x-client-info",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        allowed = response.headers["access-control-allow-headers"].lower()
        for header in ("authorization", "apikey", "content-type", "x-client-info"):
            assert header in allowed
