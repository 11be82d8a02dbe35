"""URL scraping service for extracting display metadata from web pages."""
import asyncio
import logging
import re
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup, Tag

from core.config import get_settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 8.0
MAX_DESCRIPTION_LENGTH = 200

# Many sites block or serve stripped-down pages to clients without browser-like headers
REQUEST_HEADERS = {
    'User-Agent': (
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
        '(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36'
    ),
    'Accept': (
        'text/html,application/xhtml+xml,application/xml;q=0.9,'
        'image/avif,image/webp,image/apng,*/*;q=0.8'
    ),
    'Accept-Language': 'en-US,en;q=0.9,zh-CN;q=0.8,zh;q=0.7',
}

# Bodies that can never contain markup; anything else on a 2xx is handed to the parser
BINARY_CONTENT_TYPES = (
    'image/',
    'audio/',
    'video/',
    'font/',
    'application/pdf',
    'application/zip',
    'application/octet-stream',
)

APPLE_TOUCH_ICON_RELS = ('apple-touch-icon', 'apple-touch-icon-precomposed')
STANDARD_ICON_RELS = ('icon', 'shortcut icon')

# Assumed edge length when a <link> declares no usable "sizes" attribute
DEFAULT_APPLE_TOUCH_ICON_SIZE = 152
DEFAULT_ICON_SIZE = 16

_WHITESPACE_RUN = re.compile(r'\s+')
_CONTROL_CHARS = re.compile(r'[\n\r\t]')


@dataclass
class PageUrl:
    """Parsed components of the page being scraped."""

    url: str
    scheme: str
    hostname: str
    base_url: str  # scheme://host[:port], no trailing slash


@dataclass
class FetchResult:
    """Result of fetching a URL (raw HTML before extraction)."""

    html: str | None
    final_url: str
    status_code: int | None
    error: str | None


@dataclass
class ExtractedMetadata:
    """
    Display metadata for a page.

    title, description and favicon are always populated (description may be empty);
    og_image is None when the page declares no preview image.
    """

    title: str
    description: str
    favicon: str
    og_image: str | None = None


def parse_page_url(url: str) -> PageUrl:
    """
    Parse and validate an absolute http(s) URL.

    Args:
        url: The URL to parse.

    Returns:
        PageUrl with scheme, hostname and base URL.

    Raises:
        ValueError: If the URL is not an absolute http(s) URL with a host.
    """
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    if scheme not in ('http', 'https'):
        raise ValueError(f"Invalid URL (expected http or https): {url}")
    hostname = parsed.hostname
    if not hostname:
        raise ValueError(f"Invalid URL (no hostname): {url}")

    host = f"[{hostname}]" if ':' in hostname else hostname
    port = parsed.port  # raises ValueError for a non-numeric or out-of-range port
    if port is not None:
        host = f"{host}:{port}"

    return PageUrl(
        url=url,
        scheme=scheme,
        hostname=hostname,
        base_url=f"{scheme}://{host}",
    )


def fallback_favicon(hostname: str) -> str:
    """Third-party favicon service URL for a hostname."""
    return get_settings().favicon_for(hostname)


def build_default_metadata(page: PageUrl) -> ExtractedMetadata:
    """Metadata returned when the page cannot be fetched or parsed."""
    return ExtractedMetadata(
        title=page.hostname.removeprefix('www.'),
        description='',
        favicon=fallback_favicon(page.hostname),
    )


def resolve_url(path: str, base_url: str, scheme: str) -> str:
    """
    Resolve an icon or image reference against the page it was found on.

    - Absolute (http:// or https://): returned unchanged.
    - Protocol-relative (//cdn.example.com/a.png): page scheme is prepended.
    - Root-relative (/a.png): base URL is prepended.
    - Anything else (a.png): base URL and a slash are prepended.

    Args:
        path: The href/content value as written in the page.
        base_url: scheme://host[:port] of the page.
        scheme: Page scheme without the colon ('http' or 'https').
    """
    if path.startswith(('http://', 'https://')):
        return path
    if path.startswith('//'):
        return f"{scheme}:{path}"
    if path.startswith('/'):
        return f"{base_url}{path}"
    return f"{base_url}/{path}"


def clean_text(text: str) -> str:
    """Collapse whitespace runs to a single space, drop newlines/tabs, and trim."""
    text = _WHITESPACE_RUN.sub(' ', text)
    text = _CONTROL_CHARS.sub('', text)
    return text.strip()


def _first_meta_content(soup: BeautifulSoup, key: str) -> str | None:
    """
    Return the first non-empty content of a <meta> identified by property or name.

    Open Graph tags are specified with property= and Twitter tags with name=, but
    both spellings are common in the wild so either attribute is accepted.
    """
    for attr in ('property', 'name'):
        for tag in soup.find_all('meta', attrs={attr: key}):
            content = tag.get('content')
            if content and content.strip():
                return content.strip()
    return None


def _link_rel(link: Tag) -> str:
    # BeautifulSoup splits rel into a list ('shortcut icon' -> ['shortcut', 'icon'])
    rel = link.get('rel')
    if isinstance(rel, list):
        rel = ' '.join(rel)
    return (rel or '').strip().lower()


def _icon_size(sizes: str | None, default: int) -> int:
    """Edge length from a sizes attribute like '180x180' (first entry wins)."""
    entries = (sizes or '').split()
    if not entries:
        return default
    width = entries[0].lower().split('x')[0]
    return int(width) if width.isdigit() else default


def find_best_icon(soup: BeautifulSoup) -> str | None:
    """
    Pick the best declared icon href.

    Apple touch icons win over standard icons. Among apple touch icons the largest
    declared size wins; among standard icons SVG wins, then the largest size.
    Ties keep document order.

    Returns:
        The raw (unresolved) href, or None if the page declares no icon.
    """
    touch_icons: list[tuple[int, str]] = []
    standard_icons: list[tuple[bool, int, str]] = []

    for link in soup.find_all('link', href=True):
        href = link['href'].strip()
        if not href:
            continue
        rel = _link_rel(link)
        if rel in APPLE_TOUCH_ICON_RELS:
            size = _icon_size(link.get('sizes'), DEFAULT_APPLE_TOUCH_ICON_SIZE)
            touch_icons.append((size, href))
        elif rel in STANDARD_ICON_RELS:
            size = _icon_size(link.get('sizes'), DEFAULT_ICON_SIZE)
            is_svg = 'svg' in (link.get('type') or '').lower()
            standard_icons.append((is_svg, size, href))

    if touch_icons:
        touch_icons.sort(key=lambda icon: -icon[0])
        return touch_icons[0][1]
    if standard_icons:
        standard_icons.sort(key=lambda icon: (not icon[0], -icon[1]))
        return standard_icons[0][2]
    return None


def extract_html_metadata(
    html: str,
    page: PageUrl,
    defaults: ExtractedMetadata | None = None,
) -> ExtractedMetadata:
    """
    Extract title, description, favicon and preview image from HTML.

    Pure function with no I/O. Uses BeautifulSoup for parsing.

    Title extraction priority:
    1. <meta property="og:title">
    2. <meta name="twitter:title">
    3. <title> tag
    4. defaults.title (hostname without "www.")

    Description extraction priority:
    1. <meta property="og:description">
    2. <meta name="description">
    3. <meta name="twitter:description">
    4. empty string

    Favicon: apple-touch-icon, then icon/shortcut icon, then the favicon service.
    Preview image: og:image, then twitter:image / twitter:image:src, else None.

    Args:
        html:
            Raw HTML string to parse.
        page:
            The page the HTML was fetched from, used to resolve relative paths.
        defaults:
            Fallback values; built from the page URL when omitted.

    Returns:
        Fully populated ExtractedMetadata.
    """
    if defaults is None:
        defaults = build_default_metadata(page)

    soup = BeautifulSoup(html, 'lxml')

    title = _first_meta_content(soup, 'og:title') or _first_meta_content(soup, 'twitter:title')
    if not title:
        title_tag = soup.find('title')
        if title_tag is not None:
            title = title_tag.get_text().strip() or None
    title = clean_text(title) if title else ''
    if not title:
        title = defaults.title

    description = (
        _first_meta_content(soup, 'og:description')
        or _first_meta_content(soup, 'description')
        or _first_meta_content(soup, 'twitter:description')
        or ''
    )
    description = clean_text(description)[:MAX_DESCRIPTION_LENGTH]

    icon_href = find_best_icon(soup)
    if icon_href:
        favicon = resolve_url(icon_href, page.base_url, page.scheme)
    else:
        favicon = fallback_favicon(page.hostname)

    og_image = (
        _first_meta_content(soup, 'og:image')
        or _first_meta_content(soup, 'twitter:image')
        or _first_meta_content(soup, 'twitter:image:src')
    )
    if og_image:
        og_image = resolve_url(og_image, page.base_url, page.scheme)

    return ExtractedMetadata(
        title=title,
        description=description,
        favicon=favicon,
        og_image=og_image,
    )


async def fetch_url(url: str, timeout: float = DEFAULT_TIMEOUT) -> FetchResult:  # noqa: ASYNC109
    """
    Fetch an HTML page.

    Best-effort fetch that returns error info on failure rather than raising.
    Follows redirects and captures the final URL. The timeout bounds the whole
    request, not just each network operation.

    Args:
        url:
            The URL to fetch.
        timeout:
            Hard limit in seconds for the entire request.

    Returns:
        FetchResult containing the HTML or error info.
    """
    try:
        async with asyncio.timeout(timeout):
            async with httpx.AsyncClient(
                follow_redirects=True,
                timeout=timeout,
                headers=REQUEST_HEADERS,
                http2=True,
            ) as client:
                response = await client.get(url)

                if not response.is_success:
                    return FetchResult(
                        html=None,
                        final_url=str(response.url),
                        status_code=response.status_code,
                        error=f"HTTP {response.status_code}",
                    )

                content_type = response.headers.get('content-type', '').lower()
                if content_type.startswith(BINARY_CONTENT_TYPES):
                    return FetchResult(
                        html=None,
                        final_url=str(response.url),
                        status_code=response.status_code,
                        error=f"Unsupported content type: {content_type}",
                    )

                return FetchResult(
                    html=response.text,
                    final_url=str(response.url),
                    status_code=response.status_code,
                    error=None,
                )
    except (httpx.TimeoutException, TimeoutError):
        return FetchResult(html=None, final_url=url, status_code=None, error="Request timed out")
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        return FetchResult(
            html=None,
            final_url=url,
            status_code=None,
            error=f"Request failed: {e}",
        )


async def scrape_metadata(url: str, timeout: float | None = None) -> ExtractedMetadata:  # noqa: ASYNC109
    """
    Fetch a URL and extract its display metadata.

    Never raises for a well-formed URL: network errors, timeouts, non-2xx responses
    and parse failures all degrade to the hostname-derived defaults.

    Args:
        url: Absolute http(s) URL to scrape.
        timeout: Request timeout in seconds; defaults to Settings.metadata_timeout.

    Returns:
        Fully populated ExtractedMetadata.

    Raises:
        ValueError: If the URL is malformed. Raised before any network activity.
    """
    page = parse_page_url(url)
    defaults = build_default_metadata(page)
    if timeout is None:
        timeout = get_settings().metadata_timeout

    result = await fetch_url(url, timeout)
    if result.error or result.html is None:
        logger.warning("Failed to fetch metadata for %s: %s", url, result.error)
        return defaults

    try:
        return extract_html_metadata(result.html, page, defaults)
    except Exception:
        logger.warning("Failed to parse metadata for %s", url, exc_info=True)
        return defaults
