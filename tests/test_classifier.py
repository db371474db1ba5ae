"""
Tests for page_assets/classifier.py.

Covers URL resolution, path and query based bucketing, embedded data sizing,
malformed input handling and the count/sources policy of the aggregate pass.
"""

import base64
from urllib.parse import quote

import pytest

from page_assets.classifier import (
    bucket_for_subtype,
    bucket_for_url,
    classify_candidate,
    classify_candidates,
    resolve_url,
)
from page_assets.config import DEFAULT_IMAGE_EXTENSIONS, ERROR_BUCKET, UNKNOWN_BUCKET

EXTS = DEFAULT_IMAGE_EXTENSIONS
BASE = "https://x.com/p"


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

class TestResolveUrl:

    def test_relative_file(self):
        assert resolve_url("a.png", BASE) == "https://x.com/a.png"

    def test_root_relative(self):
        assert resolve_url("/img/a.jpg", "https://x.com/p/q") == "https://x.com/img/a.jpg"

    def test_protocol_relative(self):
        assert resolve_url("//cdn.y.com/a.gif", BASE) == "https://cdn.y.com/a.gif"

    def test_spaces_are_quoted(self):
        assert resolve_url("my image.png", BASE) == "https://x.com/my%20image.png"

    @pytest.mark.parametrize(
        "candidate",
        ["http://[::1/a.png", "https://x.com:99999/a.png", "http://"],
    )
    def test_malformed_raises(self, candidate):
        with pytest.raises(ValueError):
            resolve_url(candidate, BASE)


# ---------------------------------------------------------------------------
# Bucketing
# ---------------------------------------------------------------------------

class TestBucketing:

    def test_path_suffix_lowercased(self):
        assert bucket_for_url("https://x.com/A.PNG", EXTS) == ".png"

    def test_query_value_fallback(self):
        assert bucket_for_url("https://x.com/render?w=100&file=pic.png", EXTS) == ".png"

    def test_first_matching_query_value_wins(self):
        url = "https://x.com/img?a=one.webp&b=two.gif"
        assert bucket_for_url(url, EXTS) == ".webp"

    def test_encoded_url_in_query(self):
        url = "https://x.com/_next/image?url=https%3A%2F%2Fcdn.x.com%2Fpic.webp&w=64"
        assert bucket_for_url(url, EXTS) == ".webp"

    def test_no_suffix_no_query(self):
        assert bucket_for_url("https://x.com/image?id=42", EXTS) == UNKNOWN_BUCKET

    def test_unlisted_suffix(self):
        assert bucket_for_url("https://x.com/doc.pdf", EXTS) == UNKNOWN_BUCKET

    def test_allow_list_is_honoured(self):
        assert bucket_for_url("https://x.com/a.png", (".jpg",)) == UNKNOWN_BUCKET
        assert bucket_for_url("https://x.com/a.heic", (".heic",)) == ".heic"

    def test_subtype_modifier_stripped(self):
        assert bucket_for_subtype("svg+xml", EXTS) == ".svg"
        assert bucket_for_subtype("PNG", EXTS) == ".png"
        assert bucket_for_subtype("x-icon", EXTS) == UNKNOWN_BUCKET


# ---------------------------------------------------------------------------
# Single candidate classification
# ---------------------------------------------------------------------------

class TestClassifyCandidate:

    def test_linked_image(self):
        result = classify_candidate("a.png", BASE, EXTS)
        assert (result.bucket, result.source, result.size) == (".png", "https://x.com/a.png", 0)

    def test_base64_data_size_is_decoded_length(self):
        payload = base64.b64encode(b"\x89PNG" + b"\x00" * 60).decode()
        candidate = f"data:image/png;base64,{payload}"
        result = classify_candidate(candidate, BASE, EXTS)
        assert result.bucket == ".png"
        assert result.size == 64
        assert result.source == candidate

    def test_unpadded_base64_is_decoded(self):
        # "iVBORw0KGgo" is the 8-byte PNG signature without its trailing "="
        result = classify_candidate("data:image/png;base64,iVBORw0KGgo", BASE, EXTS)
        assert (result.bucket, result.size) == (".png", 8)

    def test_base64_line_breaks_and_noise_are_ignored(self):
        payload = base64.b64encode(b"0123456789").decode()
        candidate = f"data:image/gif;base64,{payload[:6]}\n {payload[6:]}"
        result = classify_candidate(candidate, BASE, EXTS)
        assert (result.bucket, result.size) == (".gif", 10)

    def test_base64_with_extra_parameters(self):
        payload = base64.b64encode(b"<svg/>").decode()
        candidate = f"data:image/svg+xml;charset=utf-8;base64,{payload}"
        result = classify_candidate(candidate, BASE, EXTS)
        assert (result.bucket, result.size) == (".svg", 6)

    def test_percent_encoded_svg_size_is_utf8_length(self):
        text = '<svg xmlns="http://www.w3.org/2000/svg"><text>café</text></svg>'
        candidate = "data:image/svg+xml," + quote(text)
        result = classify_candidate(candidate, BASE, EXTS)
        assert result.bucket == ".svg"
        assert result.size == len(text.encode("utf-8"))
        assert result.size == len(text) + 1

    def test_data_subtype_not_in_allow_list(self):
        result = classify_candidate("data:image/x-icon;base64,AAAB", BASE, EXTS)
        assert (result.bucket, result.size) == (UNKNOWN_BUCKET, 3)

    def test_unrecognised_data_url(self):
        result = classify_candidate("data:image/", BASE, EXTS)
        assert (result.bucket, result.source, result.size) == (UNKNOWN_BUCKET, "data:image/", 0)

    def test_undecodable_base64(self):
        candidate = "data:image/png;base64,AAAAA"
        result = classify_candidate(candidate, BASE, EXTS)
        assert (result.bucket, result.source, result.size) == (ERROR_BUCKET, candidate, 0)

    def test_malformed_keeps_original_string(self):
        result = classify_candidate("http://[::1/broken.png", BASE, EXTS)
        assert result.bucket == ERROR_BUCKET
        assert result.source == "http://[::1/broken.png"

    def test_non_http_scheme_is_unknown_with_resolved_source(self):
        result = classify_candidate("javascript:void(0)", BASE, EXTS)
        assert (result.bucket, result.source) == (UNKNOWN_BUCKET, "javascript:void(0)")

    def test_non_image_data_url_is_unknown(self):
        result = classify_candidate("data:text/plain,hello", BASE, EXTS)
        assert result.bucket == UNKNOWN_BUCKET


# ---------------------------------------------------------------------------
# Aggregate pass
# ---------------------------------------------------------------------------

class TestClassifyCandidates:

    def test_exact_duplicates_and_empty_values_dropped(self):
        inventory = classify_candidates(["a.png", "a.png", "", None], BASE, EXTS)
        assert inventory[".png"].count == 1
        assert inventory[".png"].sources == ["https://x.com/a.png"]

    def test_same_resolved_url_counted_per_candidate_listed_once(self):
        inventory = classify_candidates(
            ["a.png", "/a.png", "https://x.com/a.png"], BASE, EXTS
        )
        detail = inventory[".png"]
        assert detail.count == 3
        assert detail.sources == ["https://x.com/a.png"]

    def test_sources_are_scoped_per_bucket(self):
        data = "data:image/png;base64," + base64.b64encode(b"abcd").decode()
        inventory = classify_candidates(
            ["a.png", data, "photo", "http://[::1/x"], BASE, EXTS
        )
        assert inventory[".png"].count == 2
        assert inventory[".png"].total_size == 4
        assert inventory[UNKNOWN_BUCKET].sources == ["https://x.com/photo"]
        assert inventory[ERROR_BUCKET].sources == ["http://[::1/x"]

    def test_rerun_is_idempotent(self):
        candidates = ["a.png", "b.jpg?x=1", "/img?file=c.gif", "weird"]
        first = classify_candidates(candidates, BASE, EXTS).to_dict()
        second = classify_candidates(candidates, BASE, EXTS).to_dict()
        assert first == second
