import html
import re

from parsel import Selector


_TRAKHEESI_PATH = r"trakheesi\.dubailand\.gov\.ae/rev/madmoun/listing/validation\?khevJujtDig=[A-Za-z0-9_-]+"
_TRAKHEESI_FULL_RE = re.compile(r"https?://(?:www\.)?" + _TRAKHEESI_PATH)
_TRAKHEESI_BARE_RE = re.compile(r"(?:www\.)?" + _TRAKHEESI_PATH)
_TRAKHEESI_TEXT_RE = re.compile(r"trakheesi\s+permit", re.IGNORECASE)
_ZONE_LABEL_RE = re.compile(r"^zone\s*name$", re.IGNORECASE)
_ZONE_FALLBACK_RE = re.compile(
    r"Zone\s*Name[\s\S]{0,300}?<span[^>]*>([^<]+)</span>", re.IGNORECASE
)


def norm_ws(value):
    if value is None:
        return ""
    return re.sub(r"\s+", " ", str(value)).strip()


def _node_text(node):
    return norm_ws(" ".join(node.xpath(".//text()").getall()))


def absolutize_href(href):
    href = (href or "").strip()
    if not href:
        return None
    if href.lower().startswith("http"):
        return href
    return "https://" + re.sub(r"^//", "", href)


def extract_trakheesi_url(html_text):
    """Find the Dubai Land Department permit validation link in the markup."""
    if not html_text:
        return None
    match = _TRAKHEESI_FULL_RE.search(html_text)
    if match:
        return match.group(0)
    match = _TRAKHEESI_BARE_RE.search(html_text)
    if match:
        return "https://" + match.group(0)
    selector = Selector(text=html_text)
    for anchor in selector.css("a"):
        href = anchor.attrib.get("href")
        if href and "trakheesi.dubailand.gov.ae/rev/madmoun/listing/validation" in href:
            return absolutize_href(html.unescape(href))
    for anchor in selector.css("a"):
        if _TRAKHEESI_TEXT_RE.search(_node_text(anchor)):
            href = anchor.attrib.get("href")
            if href:
                return absolutize_href(html.unescape(href))
            break
    return None


def extract_zone_name(html_text):
    """Read the value of the "Zone Name" row of Bayut's property-info list."""
    if not html_text:
        return None
    selector = Selector(text=html_text)
    for item in selector.css("li"):
        label_nodes = item.xpath("(.//*[self::div or self::span or self::strong])[1]")
        if not label_nodes:
            continue
        label = _node_text(label_nodes[0])
        if not _ZONE_LABEL_RE.match(label):
            continue
        for span in item.css("span"):
            value = _node_text(span)
            if value and not _ZONE_LABEL_RE.match(value):
                return value
    match = _ZONE_FALLBACK_RE.search(html_text)
    if match:
        value = norm_ws(html.unescape(match.group(1)))
        if value and not _ZONE_LABEL_RE.match(value):
            return value
    return None
