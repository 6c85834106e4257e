"""Building/unit name lookup against the Dubai Pulse property registry.

The registry is read-only. For every candidate property id (see
`permits.generate_candidate_ids`) the general `allpropmon` index is queried
first, then the table matching the permit's asset type. The first row found
anywhere ends the search. Lookup failures are logged and reported as an
``error`` status, and callers treat them exactly like ``not_found``.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from dubai_unit_finder.config import Settings, get_settings
from dubai_unit_finder.errors import EnrichmentFailure
from dubai_unit_finder.permits import AssetType, PermitClassification, generate_candidate_ids


logger = logging.getLogger("duf.registry")

STATUS_RESOLVED = "resolved"
STATUS_NOT_FOUND = "not_found"
STATUS_ERROR = "error"
STATUS_SKIPPED = "skipped"

INDEX_TABLE = "allpropmon"
INDEX_COLUMNS = ("sub_title", "unit_number")

_engine: Optional[Engine] = None
_engine_lock = threading.Lock()


def build_registry_url(settings: Settings):
    if settings.registry_database_url:
        return make_url(settings.registry_database_url)
    return URL.create(
        "postgresql+psycopg",
        username=settings.database_user or None,
        password=settings.database_password or None,
        host=settings.database_host or None,
        port=settings.database_port,
        database=settings.registry_database_name or None,
    )


def _engine_options(url, settings: Settings) -> dict:
    options = {"pool_pre_ping": True, "future": True}
    if url.get_backend_name() == "postgresql":
        timeout_s = max(1, int(settings.registry_timeout_s))
        options.update(
            pool_size=settings.registry_pool_size,
            max_overflow=0,
            pool_timeout=timeout_s,
            connect_args={
                "connect_timeout": timeout_s,
                "options": f"-c statement_timeout={timeout_s * 1000}",
            },
        )
    return options


def get_engine(settings: Optional[Settings] = None) -> Engine:
    """Process-wide registry engine, created on first use."""
    global _engine
    if _engine is not None:
        return _engine
    with _engine_lock:
        if _engine is None:
            settings = settings or get_settings()
            url = build_registry_url(settings)
            _engine = create_engine(url, **_engine_options(url, settings))
            logger.info(
                "registry engine created backend=%s host=%s",
                url.get_backend_name(),
                url.host or "",
            )
    return _engine


def dispose_engine() -> None:
    global _engine
    with _engine_lock:
        if _engine is not None:
            _engine.dispose()
            _engine = None


def _text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _index_names(row) -> Tuple[Optional[str], Optional[str]]:
    return _text(row["sub_title"]) or None, _text(row["unit_number"]) or None


def _building_names(row) -> Tuple[Optional[str], Optional[str]]:
    project = _text(row["project_name_en"])
    number = _text(row["building_number"])
    if project:
        return f"{project} - {number}", None
    return number or None, None


def _land_names(row) -> Tuple[Optional[str], Optional[str]]:
    pre_registration = _text(row["pre_registration_number"])
    land_number = _text(row["land_number"])
    if pre_registration:
        return f"{pre_registration} - Land Number: {land_number}", None
    return land_number or None, None


def _unit_names(row) -> Tuple[Optional[str], Optional[str]]:
    return _text(row["building_name_en"]) or None, _text(row["unit_number"]) or None


@dataclass(frozen=True)
class TypeTable:
    table: str
    columns: Tuple[str, ...]
    compose: Callable


TYPE_TABLES: Dict[AssetType, TypeTable] = {
    AssetType.BUILDING: TypeTable(
        "buildings", ("project_name_en", "building_number"), _building_names
    ),
    AssetType.LAND: TypeTable(
        "land_registry", ("pre_registration_number", "land_number"), _land_names
    ),
    AssetType.UNIT: TypeTable(
        "units", ("building_name_en", "unit_number"), _unit_names
    ),
}


def build_select(table, columns, with_area, migrated_only):
    sql = f"SELECT {', '.join(columns)} FROM {table} WHERE property_id = :property_id"
    if with_area:
        sql += " AND area_name_en = :area_name"
    if migrated_only:
        sql += " AND migrated = true"
    return text(sql + " LIMIT 1")


@dataclass(frozen=True)
class RegistryLookup:
    status: str
    building_name: Optional[str] = None
    unit_number: Optional[str] = None
    candidate_id: Optional[str] = None
    table: Optional[str] = None
    error: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.status == STATUS_RESOLVED


class RegistryResolver:
    def __init__(self, engine: Optional[Engine] = None, settings: Optional[Settings] = None):
        self._engine = engine
        self._settings = settings

    def _get_engine(self) -> Optional[Engine]:
        if self._engine is not None:
            return self._engine
        settings = self._settings or get_settings()
        if not settings.registry_configured:
            return None
        return get_engine(settings)

    def _first_row(self, conn, table, columns, candidate_id, area_name, migrated_only):
        params = {"property_id": candidate_id}
        if area_name:
            params["area_name"] = area_name
        stmt = build_select(table, columns, bool(area_name), migrated_only)
        return conn.execute(stmt, params).mappings().first()

    def _hit(self, compose, row, candidate_id, table) -> RegistryLookup:
        try:
            building_name, unit_number = compose(row)
        except KeyError as exc:
            raise EnrichmentFailure(f"malformed {table} row: missing {exc}") from exc
        return RegistryLookup(
            status=STATUS_RESOLVED,
            building_name=building_name,
            unit_number=unit_number,
            candidate_id=candidate_id,
            table=table,
        )

    def _search(self, conn, classification, area_name) -> RegistryLookup:
        type_table = TYPE_TABLES.get(classification.asset_type)
        for candidate_id in generate_candidate_ids(classification.property_id):
            row = self._first_row(
                conn, INDEX_TABLE, INDEX_COLUMNS, candidate_id, area_name, False
            )
            if row is not None:
                return self._hit(_index_names, row, candidate_id, INDEX_TABLE)
            if type_table is None:
                continue
            row = self._first_row(
                conn, type_table.table, type_table.columns, candidate_id, area_name, True
            )
            if row is None and area_name:
                row = self._first_row(
                    conn, type_table.table, type_table.columns, candidate_id, None, True
                )
            if row is not None:
                return self._hit(type_table.compose, row, candidate_id, type_table.table)
        return RegistryLookup(status=STATUS_NOT_FOUND)

    def resolve(
        self, classification: PermitClassification, area_name: Optional[str] = None
    ) -> RegistryLookup:
        if not classification.property_id:
            return RegistryLookup(status=STATUS_SKIPPED)
        area_name = (area_name or "").strip() or None
        try:
            engine = self._get_engine()
            if engine is None:
                logger.debug("registry not configured, skipping lookup")
                return RegistryLookup(status=STATUS_SKIPPED)
            with engine.connect() as conn:
                lookup = self._search(conn, classification, area_name)
        except (SQLAlchemyError, EnrichmentFailure, TypeError, ValueError) as exc:
            logger.warning(
                "registry lookup failed property_id=%s error=%s",
                classification.property_id,
                exc,
            )
            return RegistryLookup(status=STATUS_ERROR, error=str(exc))
        logger.info(
            "registry lookup status=%s property_id=%s candidate=%s table=%s",
            lookup.status,
            classification.property_id,
            lookup.candidate_id,
            lookup.table,
        )
        return lookup
