"""Tests for response rendering helpers."""

from image_conversion_service.models import InlineResult, StoredObject
from image_conversion_service.direct import content_disposition, render_result


def test_plain_ascii_name_is_quoted():
    assert content_disposition("photo.avif") == 'attachment; filename="photo.avif"'


def test_separators_and_quotes_are_escaped():
    """Quotes and backslashes never reach the quoted value; the exact name goes in filename*."""
    header = content_disposition('my; "best"\\shot.png')

    assert header == (
        'attachment; filename="my; _best__shot.png"; '
        "filename*=UTF-8''my%3B%20%22best%22%5Cshot.png"
    )


def test_non_latin_name_is_header_safe():
    header = content_disposition("фото.png")

    header.encode("latin-1")
    assert header == "attachment; filename=\"____.png\"; filename*=UTF-8''%D1%84%D0%BE%D1%82%D0%BE.png"


def test_render_result_inline_and_stored():
    inline = render_result(InlineResult(content=b"abc", media_type="image/png", filename="a.png"))
    assert inline.body == b"abc"
    assert inline.media_type == "image/png"
    assert inline.headers["content-disposition"] == 'attachment; filename="a.png"'

    stored = render_result(StoredObject(bucket="b", key="k.jpg", region="r", url="https://b.s3.r.amazonaws.com/k.jpg"))
    assert stored.body == b"https://b.s3.r.amazonaws.com/k.jpg"
    assert stored.media_type == "text/plain"
