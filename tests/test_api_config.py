from __future__ import annotations

from rover_service.main import create_app
from rover_service.services.dependencies import Overrides
from rover_service.settings import Settings

from tests.conftest import ANALYSIS_URL


async def test_override_endpoint_round_trip(service_client, state_store, analyzer):
    resp = await service_client.get("/rover/config/analysis-endpoint")
    assert await resp.json() == {"url": ANALYSIS_URL, "source": "default"}

    resp = await service_client.put("/rover/config/analysis-endpoint", json={"url": "http://backup.test/data"})
    assert resp.status == 200
    assert state_store.data["config:analysis_url"] == "http://backup.test/data"

    await service_client.post(
        "/rover",
        json={"deviceId": 42, "sampleId": 1, "batteryLevel": 1, "temperature": 1, "humidity": 1, "imagePayload": "x"},
    )
    assert analyzer.calls[-1][1] == "http://backup.test/data"

    resp = await service_client.delete("/rover/config/analysis-endpoint")
    assert await resp.json() == {"url": ANALYSIS_URL, "source": "default"}


async def test_invalid_override_url(service_client):
    resp = await service_client.put("/rover/config/analysis-endpoint", json={"url": "not a url"})
    assert resp.status == 400


async def test_override_disabled_without_key(aiohttp_client, rover_repo, state_store, analyzer):
    settings = Settings(_env_file=None, analysis_service_url=ANALYSIS_URL, analysis_url_key=None)
    app = create_app(settings, Overrides(rover_repo=rover_repo, state_store=state_store, analysis_client=analyzer))
    client = await aiohttp_client(app)

    resp = await client.put("/rover/config/analysis-endpoint", json={"url": "http://backup.test/data"})
    assert resp.status == 409

    resp = await client.get("/rover/config/analysis-endpoint")
    assert (await resp.json())["source"] == "default"
