"""
Font embedding pipeline.

Resolves a family's stylesheet from Google Fonts, downloads every font file it
references and rebuilds the @font-face rules with base64 data URIs, so the
resulting CSS renders without any network access (canvas export, offline
documents).

Families are processed one after another. A family that cannot be resolved,
has no usable faces, or whose downloads all fail is skipped; it never prevents
the remaining families from being embedded.

License: MIT
"""

import base64
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from fontembed.config import settings
from fontembed.errors import (
    EmbeddingError, InvalidRequestError, NoVariantsEmbeddedError,
    NoVariantsFoundError, ResolutionError, ResourceFetchError
)
from fontembed.models import (
    EmbedResult, EmbeddedResource, EmbeddedStylesheet, FaceDescriptor,
    FamilyStage, FontRequest
)

logger = logging.getLogger(__name__)

FONT_FACE_PATTERN = re.compile(r"@font-face\s*{[^}]*}")
WEIGHT_PATTERN = re.compile(r"font-weight:\s*([^;}]+)")
STYLE_PATTERN = re.compile(r"font-style:\s*([^;}]+)")
URL_PATTERN = re.compile(r"url\(([^)]+)\)")
QUOTE_PATTERN = re.compile(r"['\"]")

FACE_TEMPLATE = """@font-face {{
  font-family: '{family}';
  font-style: {style};
  font-weight: {weight};
  font-display: swap;
  src: url(data:font/{format};base64,{payload}) format('{format}');
}}"""


@dataclass
class FamilyOutcome:
    """Result of running one family through the pipeline."""
    family: str
    stage: FamilyStage
    stylesheet: Optional[EmbeddedStylesheet] = None
    error: Optional[Exception] = None
    failed_at: Optional[FamilyStage] = None

    @property
    def embedded(self) -> bool:
        return self.stage is FamilyStage.DONE


def create_http_client() -> httpx.AsyncClient:
    """Create the client used for all outbound font requests."""
    return httpx.AsyncClient(timeout=settings.http_timeout, follow_redirects=True)


def build_stylesheet_url(family: str, weights: Sequence[str]) -> str:
    """Build the Google Fonts CSS2 URL for a family and its weights."""
    # Same escaping as encodeURIComponent so ':' in a name cannot leak into the axis list
    family_param = quote(family, safe="!~*'()")
    return f"{settings.css_api_url}?family={family_param}:wght@{';'.join(weights)}&display=swap"


async def resolve_stylesheet(client: httpx.AsyncClient, family: str, weights: Sequence[str]) -> str:
    """
    Fetch the stylesheet Google Fonts generates for a family.

    Args:
        client: HTTP client
        family: Google Font family name
        weights: Weight tokens to request

    Returns:
        CSS text

    Raises:
        ResolutionError: If the request fails or returns a non-success status
    """
    url = build_stylesheet_url(family, weights)
    try:
        response = await client.get(url, headers={"User-Agent": settings.user_agent})
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise ResolutionError(family, reason=str(e)) from e

    if not response.is_success:
        raise ResolutionError(family, response.status_code)

    return response.text


def extract_faces(css_text: str, family: str) -> List[FaceDescriptor]:
    """
    Find the @font-face rules of a stylesheet.

    This is a block-local pattern match, not a CSS parser. Weight and style
    default to "400" and "normal"; blocks without a url() are skipped and only
    the first url() of a block is used.
    """
    descriptors = []

    for block in FONT_FACE_PATTERN.findall(css_text):
        url_match = URL_PATTERN.search(block)
        if not url_match:
            continue

        weight_match = WEIGHT_PATTERN.search(block)
        style_match = STYLE_PATTERN.search(block)
        descriptors.append(FaceDescriptor(
            weight=(weight_match.group(1).strip() if weight_match else "") or "400",
            style=(style_match.group(1).strip() if style_match else "") or "normal",
            url=QUOTE_PATTERN.sub("", url_match.group(1)).strip(),
        ))

    logger.debug(f"Found {len(descriptors)} font face(s) for {family}")
    return descriptors


def detect_format(url: str) -> str:
    """Map a font url to its CSS format() tag."""
    # '.woff2' first: '.woff' is a prefix of it
    if ".woff2" in url:
        return "woff2"
    if ".woff" in url:
        return "woff"
    return "truetype"


async def fetch_font(client: httpx.AsyncClient, url: str) -> bytes:
    """
    Download one font file.

    Raises:
        ResourceFetchError: On transport errors, non-success status, or a body
            larger than the configured limit
    """
    limit = settings.max_font_bytes
    try:
        async with client.stream("GET", url) as response:
            if not response.is_success:
                raise ResourceFetchError(url, response.status_code)

            declared = response.headers.get("content-length", "")
            if declared.isdigit() and int(declared) > limit:
                raise ResourceFetchError(url, reason=f"declared size {declared} exceeds {limit} bytes")

            data = bytearray()
            async for chunk in response.aiter_bytes():
                data.extend(chunk)
                if len(data) > limit:
                    raise ResourceFetchError(url, reason=f"body exceeds {limit} bytes")
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise ResourceFetchError(url, reason=str(e)) from e

    return bytes(data)


async def inline_resources(
    client: httpx.AsyncClient,
    descriptors: Sequence[FaceDescriptor],
    family: str
) -> Dict[str, EmbeddedResource]:
    """
    Download and base64 encode the font file of every descriptor.

    Each unique url is fetched once. A failed download is logged and skipped.

    Returns:
        Mapping of url to embedded resource

    Raises:
        NoVariantsEmbeddedError: If no download succeeded
    """
    embedded: Dict[str, EmbeddedResource] = {}
    failed = set()

    for descriptor in descriptors:
        url = descriptor.url
        if url in embedded or url in failed:
            continue

        try:
            data = await fetch_font(client, url)
        except ResourceFetchError as e:
            logger.warning(f"Failed to download variant {descriptor.weight} for {family}: {e}")
            failed.add(url)
            continue

        embedded[url] = EmbeddedResource(
            url=url,
            payload=base64.b64encode(data).decode("ascii"),
            format=detect_format(url),
        )

    if not embedded:
        raise NoVariantsEmbeddedError(family)

    return embedded


def assemble_stylesheet(
    family: str,
    descriptors: Sequence[FaceDescriptor],
    embedded: Dict[str, EmbeddedResource]
) -> str:
    """Emit one @font-face rule per descriptor whose font file was embedded."""
    blocks = []

    for descriptor in descriptors:
        resource = embedded.get(descriptor.url)
        if resource is None:
            continue

        blocks.append(FACE_TEMPLATE.format(
            family=family,
            style=descriptor.style,
            weight=descriptor.weight,
            format=resource.format,
            payload=resource.payload,
        ))

    return "\n".join(blocks)


async def embed_family(client: httpx.AsyncClient, font: FontRequest) -> FamilyOutcome:
    """
    Run one family through resolve, extract, inline and assemble.

    Pipeline errors are captured in the returned outcome instead of raised.
    """
    stage = FamilyStage.RESOLVING

    try:
        css_text = await resolve_stylesheet(client, font.family, font.weights)

        stage = FamilyStage.EXTRACTING
        descriptors = extract_faces(css_text, font.family)
        if not descriptors:
            raise NoVariantsFoundError(font.family)

        stage = FamilyStage.INLINING
        embedded = await inline_resources(client, descriptors, font.family)

        stage = FamilyStage.ASSEMBLING
        css = assemble_stylesheet(font.family, descriptors, embedded)

    except EmbeddingError as e:
        logger.warning(f"Failed to embed font {font.family} ({stage.value}): {e}")
        return FamilyOutcome(family=font.family, stage=FamilyStage.SKIPPED, error=e, failed_at=stage)

    except Exception as e:
        logger.error(f"Unexpected error embedding font {font.family} ({stage.value}): {e}", exc_info=True)
        return FamilyOutcome(family=font.family, stage=FamilyStage.SKIPPED, error=e, failed_at=stage)

    logger.info(f"Embedded {len(embedded)} font file(s) for {font.family}")
    return FamilyOutcome(
        family=font.family,
        stage=FamilyStage.DONE,
        stylesheet=EmbeddedStylesheet(family=font.family, css=css),
    )


def validate_fonts(fonts: Any) -> List[Any]:
    """
    Check the top-level font list before any network activity.

    Raises:
        InvalidRequestError: If fonts is missing, not a list, or empty
    """
    if not isinstance(fonts, list) or not fonts:
        raise InvalidRequestError()
    return fonts


def collect_outcomes(outcomes: Sequence[FamilyOutcome]) -> EmbedResult:
    """Join the CSS of every embedded family, in request order."""
    stylesheets = [outcome.stylesheet.css for outcome in outcomes if outcome.embedded]
    return EmbedResult(css="\n".join(stylesheets), fonts_embedded=len(stylesheets))


async def embed_fonts(client: httpx.AsyncClient, fonts: Any) -> EmbedResult:
    """
    Embed every requested family.

    Args:
        client: HTTP client
        fonts: Raw list of {family, weights} entries

    Returns:
        Combined CSS and the number of families embedded

    Raises:
        InvalidRequestError: If the font list is missing or empty
    """
    entries = validate_fonts(fonts)
    outcomes = []

    for i, entry in enumerate(entries):
        try:
            font = FontRequest.model_validate(entry)
        except ValidationError as e:
            logger.warning(f"Skipping invalid font entry #{i}: {e}")
            family = entry.get("family") if isinstance(entry, dict) else None
            outcomes.append(FamilyOutcome(
                family=str(family or f"#{i}"),
                stage=FamilyStage.SKIPPED,
                error=e,
                failed_at=FamilyStage.RESOLVING,
            ))
            continue

        outcomes.append(await embed_family(client, font))

    result = collect_outcomes(outcomes)
    logger.info(f"Embedded {result.fonts_embedded}/{len(outcomes)} font families")
    return result
