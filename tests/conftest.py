import dataclasses
import os
import socket
import sys
import urllib.request
from pathlib import Path

import httpx
import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool


REPO_ROOT = Path(__file__).resolve().parents[1]
SRC = REPO_ROOT / "src"
FIXTURES = REPO_ROOT / "tests" / "fixtures"

# Prefer repo sources over any installed package.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


REGISTRY_SCHEMA = [
    "CREATE TABLE allpropmon (property_id TEXT, area_name_en TEXT, sub_title TEXT, unit_number TEXT)",
    "CREATE TABLE buildings (property_id TEXT, area_name_en TEXT, migrated BOOLEAN, project_name_en TEXT, building_number TEXT)",
    "CREATE TABLE land_registry (property_id TEXT, area_name_en TEXT, migrated BOOLEAN, pre_registration_number TEXT, land_number TEXT)",
    "CREATE TABLE units (property_id TEXT, area_name_en TEXT, migrated BOOLEAN, building_name_en TEXT, unit_number TEXT)",
]


@pytest.fixture(autouse=True)
def block_network(monkeypatch):
    if os.getenv("LIVE") == "1":
        return

    real_connect = socket.socket.connect

    def guarded_connect(sock, address):
        host = address[0] if isinstance(address, tuple) else address
        if host not in ("127.0.0.1", "localhost"):
            raise RuntimeError("Network access blocked in tests")
        return real_connect(sock, address)

    monkeypatch.setattr(socket.socket, "connect", guarded_connect)
    monkeypatch.setattr(
        urllib.request,
        "urlopen",
        lambda *args, **kwargs: (_ for _ in ()).throw(
            RuntimeError("Network access blocked in tests")
        ),
    )


def read_fixture(name):
    return (FIXTURES / name).read_text(encoding="utf-8")


class FakeWeb:
    """Routes exact URLs to canned httpx responses and records every request."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, url, status=200, text=None, content=None, headers=None, exc=None):
        self.routes[url] = {
            "status": status,
            "text": text,
            "content": content,
            "headers": headers or {},
            "exc": exc,
        }

    def handler(self, request):
        self.requests.append(request)
        route = self.routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, text="not found")
        if route["exc"] is not None:
            raise route["exc"](f"boom {request.url}", request=request)
        if route["content"] is not None:
            return httpx.Response(
                route["status"], content=route["content"], headers=route["headers"]
            )
        return httpx.Response(
            route["status"], text=route["text"] or "", headers=route["headers"]
        )

    def urls(self):
        return [str(r.url) for r in self.requests]

    def client(self):
        from dubai_unit_finder.backend.http_client import BrowserHttpClient

        return BrowserHttpClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture()
def fake_web():
    return FakeWeb()


@pytest.fixture()
def settings():
    from dubai_unit_finder.config import Settings

    return dataclasses.replace(
        Settings.from_env(),
        registry_enabled=False,
        registry_database_url=None,
    )


@pytest.fixture()
def registry_engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    with engine.begin() as conn:
        for statement in REGISTRY_SCHEMA:
            conn.execute(text(statement))
    yield engine
    engine.dispose()


def seed(engine, table, **row):
    columns = ", ".join(row)
    params = ", ".join(f":{name}" for name in row)
    with engine.begin() as conn:
        conn.execute(text(f"INSERT INTO {table} ({columns}) VALUES ({params})"), row)


PF_URL = (
    "https://www.propertyfinder.ae/en/plp/buy/"
    "apartment-for-sale-dubai-business-bay-burj-vista-9876543.html"
)
PF_IMAGE = "https://static.shared.propertyfinder.ae/media/images/listing/ABC/small.jpg"
BAYUT_URL = "https://www.bayut.com/property/details-8765432.html"
BAYUT_IMAGE = "https://images.bayut.com/thumbnails/555-400x300.jpeg"
BAYUT_NEXT_DATA_URL = (
    "https://www.bayut.com/_next/data/bayut-build-7/en/property/details-8765432.html.json"
)
JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"


def build_extractor(web, settings, engine=None):
    from dubai_unit_finder.pipeline import ListingExtractor
    from dubai_unit_finder.registry import RegistryResolver

    return ListingExtractor(
        http=web.client(),
        resolver=RegistryResolver(engine=engine, settings=settings),
        settings=settings,
    )
