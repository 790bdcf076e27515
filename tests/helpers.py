import base64

import httpx


def woff2_url(family: str, weight: str, style: str = "normal") -> str:
    slug = family.lower().replace(" ", "")
    return f"https://fonts.gstatic.com/s/{slug}/v30/{slug}-{style}-{weight}.woff2"


def font_face_block(
    *,
    family: str = "Roboto",
    weight: str | None = "400",
    style: str | None = "normal",
    url: str | None = None,
    quote: str = "",
) -> str:
    """Build one @font-face rule shaped like the Google Fonts CSS2 output."""
    lines = ["/* latin */", "@font-face {", f"  font-family: '{family}';"]
    if style is not None:
        lines.append(f"  font-style: {style};")
    if weight is not None:
        lines.append(f"  font-weight: {weight};")
    lines.append("  font-display: swap;")
    if url is not None:
        lines.append(f"  src: url({quote}{url}{quote}) format('woff2');")
    lines.append("  unicode-range: U+0000-00FF, U+0131, U+0152-0153;")
    lines.append("}")
    return "\n".join(lines) + "\n"


def font_bytes(family: str, weight: str) -> bytes:
    return f"wOF2-{family}-{weight}".encode()


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


class FakeFontOrigin:
    """
    In-memory stand-in for Google Fonts.

    Serves CSS2 stylesheets keyed by family, font files keyed by url and the
    Developer API listing; unknown resources answer 404.
    """

    def __init__(self):
        self.stylesheets: dict[str, tuple[int, str]] = {}
        self.files: dict[str, tuple[int, bytes]] = {}
        self.broken_urls: set[str] = set()
        self.catalog: tuple[int, dict] = (200, {"kind": "webfonts#webfontList", "items": []})
        self.requests: list[httpx.Request] = []

    def add_family(self, family: str, weights=("400",), status: int = 200) -> list[str]:
        """Register a family whose CSS lists one woff2 file per weight."""
        urls = []
        blocks = []
        for weight in weights:
            url = woff2_url(family, weight)
            urls.append(url)
            blocks.append(font_face_block(family=family, weight=weight, url=url))
            self.files[url] = (200, font_bytes(family, weight))
        self.stylesheets[family] = (status, "".join(blocks))
        return urls

    def set_stylesheet(self, family: str, css: str, status: int = 200):
        self.stylesheets[family] = (status, css)

    def requests_to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)

        if url in self.broken_urls:
            raise httpx.ConnectTimeout("timed out", request=request)

        if request.url.host == "fonts.googleapis.com":
            family = request.url.params["family"].split(":")[0]
            status, css = self.stylesheets.get(family, (404, "Not Found"))
            return httpx.Response(status, text=css, headers={"content-type": "text/css"})

        if request.url.host == "www.googleapis.com":
            status, payload = self.catalog
            return httpx.Response(status, json=payload)

        status, content = self.files.get(url, (404, b""))
        return httpx.Response(status, content=content)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
