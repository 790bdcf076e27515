from helpers import font_face_block, woff2_url

from fontembed.embedding import extract_faces


def test_extract_faces_reads_weight_style_and_url():
    url = woff2_url("Roboto", "700", "italic")
    css = font_face_block(weight="700", style="italic", url=url)

    faces = extract_faces(css, "Roboto")

    assert len(faces) == 1
    assert faces[0].weight == "700"
    assert faces[0].style == "italic"
    assert faces[0].url == url


def test_extract_faces_keeps_document_order():
    css = "".join(
        font_face_block(weight=w, url=woff2_url("Roboto", w)) for w in ("700", "400", "300")
    )

    faces = extract_faces(css, "Roboto")

    assert [f.weight for f in faces] == ["700", "400", "300"]


def test_extract_faces_defaults_weight_and_style():
    css = font_face_block(weight=None, style=None, url=woff2_url("Roboto", "400"))

    faces = extract_faces(css, "Roboto")

    assert faces[0].weight == "400"
    assert faces[0].style == "normal"


def test_extract_faces_skips_blocks_without_url():
    css = font_face_block(weight="400", url=None) + font_face_block(
        weight="700", url=woff2_url("Roboto", "700")
    )

    faces = extract_faces(css, "Roboto")

    assert [f.weight for f in faces] == ["700"]


def test_extract_faces_strips_quotes_from_url():
    url = woff2_url("Roboto", "400")

    single = extract_faces(font_face_block(url=url, quote="'"), "Roboto")
    double = extract_faces(font_face_block(url=url, quote='"'), "Roboto")

    assert single[0].url == url
    assert double[0].url == url


def test_extract_faces_uses_first_url_only():
    css = (
        "@font-face {\n"
        "  font-family: 'Roboto';\n"
        "  src: url(https://example.com/a.woff2) format('woff2'),"
        " url(https://example.com/a.woff) format('woff');\n"
        "}\n"
    )

    faces = extract_faces(css, "Roboto")

    assert len(faces) == 1
    assert faces[0].url == "https://example.com/a.woff2"


def test_extract_faces_preserves_values_verbatim():
    css = "@font-face { font-weight:BOLD; font-style: Oblique 10deg; src: url(x.ttf); }"

    faces = extract_faces(css, "Roboto")

    assert faces[0].weight == "BOLD"
    assert faces[0].style == "Oblique 10deg"


def test_extract_faces_variable_weight_range():
    css = font_face_block(weight="100 900", url=woff2_url("Inter", "var"))

    faces = extract_faces(css, "Inter")

    assert faces[0].weight == "100 900"


def test_extract_faces_empty_stylesheet():
    assert extract_faces("", "Roboto") == []
    assert extract_faces("body { color: red; }", "Roboto") == []
