"""
End-to-end tests: the real application and client against a fake upstream.
"""

import asyncio

import httpx
from aiohttp import test_utils, web

from weather_api.app import create_app
from weather_api.config import Settings


def build_upstream(make_payload):
    async def weather(request: web.Request) -> web.Response:
        city = request.query["q"]
        if request.query.get("appid") != "e2e-key":
            return web.json_response({"cod": 401, "message": "Invalid API key"}, status=401)
        if city == "broken-city":
            return web.json_response({"cod": "404", "message": "city not found"}, status=404)
        if city == "garbled-city":
            return web.Response(text="not json")
        if city == "slow-city":
            await asyncio.sleep(0.2)
        return web.json_response(make_payload(city))

    app = web.Application()
    app.router.add_get("/weather", weather)
    return app


def request_through_app(make_payload, path, params=None):
    """Serve a fake upstream and send one request through the API."""

    async def runner():
        async with test_utils.TestServer(build_upstream(make_payload)) as upstream:
            settings = Settings(
                api_key="e2e-key",
                base_url=f"http://{upstream.host}:{upstream.port}",
                timeout=5,
            )
            transport = httpx.ASGITransport(app=create_app(settings))
            async with httpx.AsyncClient(
                transport=transport, base_url="http://weather.test"
            ) as client:
                return await client.get(path, params=params)

    return asyncio.run(runner())


class TestMultiCityWorkflow:
    """Test the complete multi-city request path."""

    def test_ok_and_broken_city(self, make_payload):
        """Test that only the successful city is returned."""
        response = request_through_app(
            make_payload, "/", [("city", "ok-city"), ("city", "broken-city")]
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Weather fetched successfully"
        assert [record["name"] for record in body["data"]] == ["ok-city"]

    def test_mixed_failures(self, make_payload):
        """Test that malformed and missing cities are both dropped."""
        response = request_through_app(
            make_payload,
            "/",
            [
                ("city", "Seoul"),
                ("city", "garbled-city"),
                ("city", "slow-city"),
                ("city", "broken-city"),
            ],
        )

        assert response.status_code == 200
        names = sorted(record["name"] for record in response.json()["data"])
        assert names == ["Seoul", "slow-city"]

    def test_no_city(self, make_payload):
        """Test the missing parameter error."""
        response = request_through_app(make_payload, "/")

        assert response.status_code == 400
        assert response.json() == {"error": "At least one city parameter is required"}


class TestSingleCityWorkflow:
    """Test the complete single-city request path."""

    def test_found(self, make_payload):
        response = request_through_app(make_payload, "/weather/Busan")

        assert response.status_code == 200
        assert response.json()["name"] == "Busan"

    def test_not_found(self, make_payload):
        response = request_through_app(make_payload, "/weather/broken-city")

        assert response.status_code == 404
        assert response.json() == {"error": "City 'broken-city' not found"}
