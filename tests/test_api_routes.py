import pytest
from fastapi.testclient import TestClient

from conftest import PF_URL, build_extractor, read_fixture

from dubai_unit_finder.api.app import app, create_app, get_extractor, health


def test_api_routes_exist():
    paths = set(app.openapi()["paths"])
    for path in (
        "/health",
        "/apps/noxum/properties",
        "/apps/noxum/floorplans",
        "/apps/noxum/owners",
        "/apps/noxum/liveowners",
        "/apps/noxum/combined/all",
        "/apps/noxum/combined/properties-owners",
    ):
        assert path in paths


def test_health_function():
    assert health().model_dump() == {"status": "ok", "portals": ["propertyfinder", "bayut"]}


@pytest.fixture()
def client(fake_web, settings):
    fake_web.add(PF_URL, text=read_fixture("propertyfinder_listing.html"))
    test_app = create_app()
    extractor = build_extractor(fake_web, settings)
    test_app.dependency_overrides[get_extractor] = lambda: extractor
    with TestClient(test_app) as test_client:
        yield test_client


def test_properties_route_with_history(client):
    r = client.post("/apps/noxum/properties", params={"url": PF_URL, "user_id": "u-9"})
    assert r.status_code == 201
    body = r.json()
    assert body["result"]["success"] is True
    assert body["result"]["location"]["main_area"] == "Business Bay"
    assert body["history"]["user_id"] == "u-9"
    assert body["history"]["permit_number"] == "6912345600"


def test_properties_route_reports_extraction_failure(client):
    r = client.post("/apps/noxum/properties", params={"url": "https://example.com/x"})
    assert r.status_code == 201
    assert r.json() == {
        "result": {
            "success": False,
            "source": None,
            "url": "https://example.com/x",
            "error": "unsupported URL",
        },
        "history": None,
    }


def test_url_is_required(client):
    assert client.post("/apps/noxum/properties").status_code == 400
    assert client.get("/apps/noxum/owners", params={"url": "  "}).status_code == 400


@pytest.mark.parametrize("endpoint", ["floorplans", "owners", "liveowners"])
def test_placeholder_endpoints(client, endpoint):
    r = client.get(f"/apps/noxum/{endpoint}", params={"url": PF_URL})
    assert r.status_code == 200
    assert r.json() == {"success": True, "endpoint": endpoint, "url": PF_URL}


def test_combined_routes(client):
    r = client.get("/apps/noxum/combined/all", params={"url": PF_URL})
    assert r.status_code == 200
    data = r.json()["data"]
    assert [item.get("endpoint") for item in data] == [None, "floorplans", "owners"]
    assert data[0]["building_name"] is None

    r = client.get("/apps/noxum/combined/properties-owners", params={"url": PF_URL})
    assert len(r.json()["data"]) == 2


def test_health_route(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
