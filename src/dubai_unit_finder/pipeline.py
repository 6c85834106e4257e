import asyncio
import logging
import time

from dubai_unit_finder.backend.http_client import BrowserHttpClient
from dubai_unit_finder.config import get_settings
from dubai_unit_finder.errors import ExtractionError, MissingRegulatoryNumber, UnsupportedUrl
from dubai_unit_finder.extract.deep_search import is_absolute_url
from dubai_unit_finder.permits import classify_permit
from dubai_unit_finder.portals import classify_url, get_parser, page_timeout
from dubai_unit_finder.registry import RegistryResolver
from dubai_unit_finder.schema.records import ListingResult


logger = logging.getLogger("duf.pipeline")

GENERIC_FAILURE = "Failed to fetch or parse the page"


class ListingExtractor:
    """Runs the fetch, locate, extract and enrich stages for listing URLs.

    Instances are safe to share between concurrent extractions: the only
    shared state is the HTTP connection pool and the registry engine.
    """

    def __init__(self, http=None, resolver=None, settings=None):
        self.settings = settings or get_settings()
        self.http = http or BrowserHttpClient()
        self.resolver = resolver or RegistryResolver(settings=self.settings)

    async def aclose(self):
        await self.http.aclose()

    async def extract(self, url):
        source = classify_url(url)
        started = time.perf_counter()
        try:
            if source is None:
                raise UnsupportedUrl()
            result = await self._extract_supported(source, url)
        except ExtractionError as exc:
            result = ListingResult.failure(source, url, exc.message)
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            logger.exception("unexpected parse failure source=%s url=%s", source, url)
            result = ListingResult.failure(source, url, str(exc) or GENERIC_FAILURE)
        except Exception:
            logger.exception("extraction crashed source=%s url=%s", source, url)
            result = ListingResult.failure(source, url, GENERIC_FAILURE)
        logger.info(
            "extraction finished",
            extra={
                "source": source,
                "url": url,
                "status": "success" if result.success else "failed",
                "error": result.error,
                "seconds": round(time.perf_counter() - started, 3),
            },
        )
        return result

    async def _extract_supported(self, source, url):
        parser = get_parser(source)
        response = await self.http.fetch_page(url, page_timeout(source, self.settings))
        html_text = response["text"]
        payload = await parser.locate(html_text, url, self.http, self.settings)
        fields = parser.extract(payload, html_text)

        if not fields.regulatory.permit_number:
            raise MissingRegulatoryNumber()

        image_url = fields.property.image_url
        if is_absolute_url(image_url):
            fields.property.image_encoded = await self.http.fetch_image_data_uri(
                image_url, url, self.settings.image_timeout_s
            )

        await self._enrich(fields)
        return ListingResult.from_fields(source, url, fields)

    async def _enrich(self, fields):
        if fields.building_name and fields.unit_number:
            return
        classification = classify_permit(fields.regulatory.permit_number)
        lookup = await asyncio.to_thread(
            self.resolver.resolve, classification, fields.property.zone_name
        )
        if not lookup.resolved:
            return
        if not fields.building_name:
            fields.building_name = lookup.building_name
        if not fields.unit_number:
            fields.unit_number = lookup.unit_number

    async def floorplans(self, url):
        return {"success": True, "endpoint": "floorplans", "url": url}

    async def owners(self, url):
        return {"success": True, "endpoint": "owners", "url": url}

    async def live_owners(self, url):
        return {"success": True, "endpoint": "liveowners", "url": url}

    async def properties(self, url):
        result = await self.extract(url)
        return result.to_dict()

    async def _gather(self, url, branches):
        results = await asyncio.gather(
            *[branch(url) for branch in branches], return_exceptions=True
        )
        data = []
        for branch, value in zip(branches, results):
            if isinstance(value, Exception):
                logger.warning("combined branch %s failed: %s", branch.__name__, value)
                value = {"success": False, "url": url, "error": str(value) or GENERIC_FAILURE}
            data.append(value)
        return {"success": True, "data": data}

    async def combined_all(self, url):
        return await self._gather(url, [self.properties, self.floorplans, self.owners])

    async def combined_properties_owners(self, url):
        return await self._gather(url, [self.properties, self.owners])

    def run(self, url):
        """Synchronous entry point; closes the HTTP client when done."""

        async def _run():
            try:
                return await self.extract(url)
            finally:
                await self.aclose()

        return asyncio.run(_run())


def extract_listing(url, http=None, resolver=None, settings=None):
    return ListingExtractor(http=http, resolver=resolver, settings=settings).run(url)
