"""URL metadata for prefilling the bookmark form (title, description, thumbnail)."""
import asyncio
import ipaddress
import logging
import re
import socket
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from schemas.metadata import UrlMetadata

logger = logging.getLogger(__name__)

USER_AGENT = 'Mozilla/5.0 (compatible; Bookmarks/1.0)'
DEFAULT_TIMEOUT = 10.0
YOUTUBE_OEMBED_URL = 'https://www.youtube.com/oembed'
YOUTUBE_VIDEO_ID_LENGTH = 11

# Matches youtu.be/<id>, /v/<id>, /u/x/<id>, /embed/<id> and watch?v=<id>
YOUTUBE_URL_PATTERN = re.compile(
    r'^.*((youtu.be/)|(v/)|(/u/\w/)|(embed/)|(watch\?))\??v?=?([^#&?]*).*',
)


class SSRFBlockedError(Exception):
    """Raised when a URL targets a private/internal network address."""

    pass


def extract_youtube_video_id(url: str | None) -> str | None:
    """
    Extract the video id from the common YouTube URL formats.

    Returns:
        The 11-character video id, or None if the URL isn't a YouTube video.
    """
    if not url:
        return None
    match = YOUTUBE_URL_PATTERN.match(url)
    if match and len(match.group(7)) == YOUTUBE_VIDEO_ID_LENGTH:
        return match.group(7)
    return None


def youtube_thumbnail_url(video_id: str | None) -> str | None:
    """Medium-quality thumbnail URL for a YouTube video."""
    if not video_id:
        return None
    return f'https://img.youtube.com/vi/{video_id}/mqdefault.jpg'


def is_private_ip(ip_str: str) -> bool:
    """
    Check if an IP address is private, loopback, or otherwise internal.

    Unparseable addresses count as private.
    """
    try:
        ip = ipaddress.ip_address(ip_str)
    except ValueError:
        return True
    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_multicast
        or ip.is_reserved
        or ip.is_unspecified
    )


def validate_url_not_private(url: str) -> None:
    """
    Validate that a URL does not target a private/internal network.

    Resolves the hostname so a public name pointing at an internal address is
    caught too.

    Raises:
        SSRFBlockedError: If the URL targets a private network.
        ValueError: If the URL is malformed or the host doesn't resolve.
    """
    hostname = urlparse(url).hostname
    if not hostname:
        raise ValueError(f"Invalid URL (no hostname): {url}")

    if hostname.lower() in ('localhost', 'localhost.localdomain'):
        raise SSRFBlockedError(f"Blocked request to localhost: {url}")

    try:
        addrinfo = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except socket.gaierror as e:
        raise ValueError(f"Could not resolve hostname: {hostname}") from e
    for _, _, _, _, sockaddr in addrinfo:
        ip_str = sockaddr[0]
        if is_private_ip(ip_str):
            raise SSRFBlockedError(
                f"Blocked request to private/internal address: {url} resolves to {ip_str}",
            )


async def check_url_not_private(url: str) -> None:
    """
    Async form of validate_url_not_private.

    The DNS lookup blocks, so it runs in a worker thread instead of on the event
    loop.
    """
    await asyncio.to_thread(validate_url_not_private, url)


def extract_html_metadata(html: str) -> tuple[str | None, str | None, str | None]:
    """
    Extract title, description and preview image from HTML.

    Pure function with no I/O. Open Graph values win over plain tags because
    sites tune them for link previews.

    Returns:
        (title, description, image_url); any may be None.
    """
    soup = BeautifulSoup(html, 'lxml')

    def meta(*selectors: dict[str, str]) -> str | None:
        for attrs in selectors:
            tag = soup.find('meta', attrs=attrs)
            if tag and tag.get('content', '').strip():
                return tag['content'].strip()
        return None

    title = meta({'property': 'og:title'}, {'name': 'twitter:title'})
    if not title:
        title_tag = soup.find('title')
        if title_tag and title_tag.string and title_tag.string.strip():
            title = title_tag.string.strip()

    description = meta(
        {'property': 'og:description'},
        {'name': 'description'},
        {'name': 'twitter:description'},
    )
    image = meta({'property': 'og:image'}, {'name': 'twitter:image'})
    return title, description, image


async def fetch_youtube_metadata(
    url: str, video_id: str, timeout: float = DEFAULT_TIMEOUT,  # noqa: ASYNC109
) -> UrlMetadata:
    """Title and author via YouTube oEmbed, plus the thumbnail derived from the id."""
    thumbnail = youtube_thumbnail_url(video_id)
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(
                YOUTUBE_OEMBED_URL, params={'url': url, 'format': 'json'},
            )
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.info("YouTube oEmbed lookup failed for %s: %s", url, e)
        return UrlMetadata(
            url=url,
            thumbnail_url=thumbnail,
            video_id=video_id,
            error='Failed to fetch metadata',
        )

    author = data.get('author_name')
    return UrlMetadata(
        url=url,
        title=data.get('title') or None,
        description=f'By {author}' if author else None,
        thumbnail_url=thumbnail,
        video_id=video_id,
    )


async def fetch_page_metadata(url: str, timeout: float = DEFAULT_TIMEOUT) -> UrlMetadata:  # noqa: ASYNC109, PLR0911
    """
    Fetch an HTML page and read its title, description and preview image.

    Best effort: every failure is reported in ``error`` instead of raised.
    Private-network targets are refused, before the request and after redirects.
    """
    try:
        await check_url_not_private(url)
    except (SSRFBlockedError, ValueError) as e:
        return UrlMetadata(url=url, error=str(e))

    try:
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=timeout,
            headers={'User-Agent': USER_AGENT},
        ) as client:
            response = await client.get(url)
    except httpx.TimeoutException:
        return UrlMetadata(url=url, error='Request timed out')
    except httpx.RequestError as e:
        return UrlMetadata(url=url, error=f'Request failed: {e}')

    final_url = str(response.url)
    if final_url != url:
        try:
            await check_url_not_private(final_url)
        except (SSRFBlockedError, ValueError) as e:
            return UrlMetadata(url=url, error=f'Redirect blocked: {e}')

    if not response.is_success:
        return UrlMetadata(url=url, error=f'HTTP {response.status_code}')

    content_type = response.headers.get('content-type', '')
    if 'text/html' not in content_type.lower():
        return UrlMetadata(url=url, error=f'Unsupported content type: {content_type}')

    title, description, image = extract_html_metadata(response.text)
    return UrlMetadata(
        url=url,
        title=title,
        description=description,
        thumbnail_url=image,
    )


async def fetch_url_metadata(url: str, timeout: float = DEFAULT_TIMEOUT) -> UrlMetadata:  # noqa: ASYNC109
    """
    Prefill values for a URL: YouTube videos via oEmbed, other pages via their HTML.

    Returns:
        UrlMetadata; ``error`` is set when nothing could be fetched.
    """
    video_id = extract_youtube_video_id(url)
    if video_id:
        return await fetch_youtube_metadata(url, video_id, timeout)
    return await fetch_page_metadata(url, timeout)
