import logging
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request

from dubai_unit_finder.api.schemas import (
    CombinedResponse,
    EndpointAck,
    HealthResponse,
    PropertiesResponse,
)
from dubai_unit_finder.history import build_history_record
from dubai_unit_finder.pipeline import ListingExtractor
from dubai_unit_finder.portals import supported_portals
from dubai_unit_finder.registry import dispose_engine


logger = logging.getLogger("duf.api")

router = APIRouter(prefix="/apps/noxum", tags=["noxum"])


def get_extractor(request: Request) -> ListingExtractor:
    extractor = getattr(request.app.state, "extractor", None)
    if extractor is None:
        extractor = ListingExtractor()
        request.app.state.extractor = extractor
    return extractor


def _require_url(url: Optional[str]) -> str:
    url = (url or "").strip()
    if not url:
        raise HTTPException(status_code=400, detail="url is required")
    return url


@router.post("/properties", response_model=PropertiesResponse, status_code=201)
async def properties(
    url: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    extractor: ListingExtractor = Depends(get_extractor),
):
    url = _require_url(url)
    result = await extractor.extract(url)
    history = build_history_record(result, url, user_id) if user_id else None
    return PropertiesResponse(result=result.to_dict(), history=history)


@router.get("/floorplans", response_model=EndpointAck)
async def floorplans(
    url: Optional[str] = Query(None),
    extractor: ListingExtractor = Depends(get_extractor),
):
    return await extractor.floorplans(_require_url(url))


@router.get("/owners", response_model=EndpointAck)
async def owners(
    url: Optional[str] = Query(None),
    extractor: ListingExtractor = Depends(get_extractor),
):
    return await extractor.owners(_require_url(url))


@router.get("/liveowners", response_model=EndpointAck)
async def live_owners(
    url: Optional[str] = Query(None),
    extractor: ListingExtractor = Depends(get_extractor),
):
    return await extractor.live_owners(_require_url(url))


@router.get("/combined/all", response_model=CombinedResponse)
async def combined_all(
    url: Optional[str] = Query(None),
    extractor: ListingExtractor = Depends(get_extractor),
):
    return await extractor.combined_all(_require_url(url))


@router.get("/combined/properties-owners", response_model=CombinedResponse)
async def combined_properties_owners(
    url: Optional[str] = Query(None),
    extractor: ListingExtractor = Depends(get_extractor),
):
    return await extractor.combined_properties_owners(_require_url(url))


def health():
    return HealthResponse(status="ok", portals=supported_portals())


def create_app() -> FastAPI:
    app = FastAPI(title="Dubai Unit Finder")
    app.add_api_route("/health", health, methods=["GET"], response_model=HealthResponse)
    app.include_router(router)

    @app.on_event("shutdown")
    async def _close_clients():
        extractor = getattr(app.state, "extractor", None)
        if extractor is not None:
            await extractor.aclose()
            app.state.extractor = None
        dispose_engine()
        logger.info("api shutdown: http client and registry pool released")

    return app


app = create_app()
