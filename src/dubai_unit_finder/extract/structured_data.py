import json
import re
from urllib.parse import urljoin

from parsel import Selector


_WINDOW_STATE_RE = re.compile(r"<script[^>]*>\s*window\.state\s*=\s*", re.IGNORECASE)
_BAYUT_SLUG_RE = re.compile(r"bayut\.com/(?:en/)?property/(.*)$", re.IGNORECASE)


def parse_next_data(html_text):
    """Return the parsed `__NEXT_DATA__` document, or None."""
    if not html_text:
        return None
    selector = Selector(text=html_text)
    content = selector.xpath('//script[@id="__NEXT_DATA__"]/text()').get()
    if not content or not content.strip():
        return None
    try:
        return json.loads(content)
    except (ValueError, RecursionError):
        return None


def scan_object_literal(text, start):
    """Return the end index (exclusive) of the balanced `{...}` opening at `start`.

    Quote characters open a string that only its own delimiter closes, and a
    backslash inside a string escapes the next character, so braces inside
    string values never move the depth counter. Returns None when the object
    is not closed before the end of `text`.
    """
    depth = 0
    in_string = False
    delimiter = ""
    escaped = False
    for index in range(start, len(text)):
        ch = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == delimiter:
                in_string = False
            continue
        if ch in ('"', "'"):
            in_string = True
            delimiter = ch
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return index + 1
    return None


def extract_window_state(html_text):
    """Parse the object assigned by an inline `<script>window.state = {...}`."""
    if not html_text:
        return None
    match = _WINDOW_STATE_RE.search(html_text)
    if not match:
        return None
    start = html_text.find("{", match.end())
    if start == -1:
        return None
    end = scan_object_literal(html_text, start)
    if end is None:
        return None
    try:
        return json.loads(html_text[start:end])
    except (ValueError, RecursionError):
        return None


def bayut_slug(url):
    match = _BAYUT_SLUG_RE.search(url or "")
    if not match or not match.group(1):
        return None
    slug = match.group(1).split("?")[0].split("#")[0].rstrip("/")
    return slug or None


def build_next_data_url(url, build_id, lang="en"):
    """Derive the Next.js data endpoint for a Bayut listing page."""
    slug = bayut_slug(url)
    if not build_id or not slug:
        return None
    return urljoin(url, f"/_next/data/{build_id}/{lang}/property/{slug}.json")
