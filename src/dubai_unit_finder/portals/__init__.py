from dubai_unit_finder.schema.records import SOURCE_BAYUT, SOURCE_PROPERTYFINDER

from . import bayut, propertyfinder


_PORTAL_ENTRIES = {
    SOURCE_PROPERTYFINDER: {
        "slug": SOURCE_PROPERTYFINDER,
        "url_prefixes": (
            "https://www.propertyfinder.ae/en/plp",
            "https://www.propertyfinder.ae/to/",
        ),
        "timeout_setting": "page_timeout_propertyfinder_s",
        "notes": "Next.js page; listing facts live in __NEXT_DATA__.",
    },
    SOURCE_BAYUT: {
        "slug": SOURCE_BAYUT,
        "url_prefixes": (
            "https://www.bayut.com/property",
            "https://www.bayut.com/en/property",
        ),
        "timeout_setting": "page_timeout_bayut_s",
        "notes": "Inline window.state object; falls back to the _next/data endpoint.",
    },
}

PARSERS = {
    SOURCE_PROPERTYFINDER: propertyfinder,
    SOURCE_BAYUT: bayut,
}


def supported_portals():
    return list(_PORTAL_ENTRIES.keys())


def classify_url(url):
    """Return the portal slug for a listing URL, or None when unsupported."""
    if not isinstance(url, str):
        return None
    url = url.strip()
    for slug, entry in _PORTAL_ENTRIES.items():
        if any(url.startswith(prefix) for prefix in entry["url_prefixes"]):
            return slug
    return None


def page_timeout(slug, settings):
    return getattr(settings, _PORTAL_ENTRIES[slug]["timeout_setting"])


def get_parser(slug):
    parser = PARSERS.get(slug)
    if parser is None:
        raise KeyError(f"No parser for {slug}")
    return parser
