"""Tests for postmates_api.core.cookie_codec."""

import json

import pytest

from postmates_api.core.cookie_codec import (
    encode_location_for_cookie,
    jar_to_header_string,
    jar_to_lines,
    lines_to_jar,
    merge_jars,
    rewrite_domain,
)
from postmates_api.core.errors import MalformedCookieError


# ---------------------------------------------------------------------------
# lines_to_jar
# ---------------------------------------------------------------------------

def test_lines_to_jar_keeps_name_value_only():
    lines = [
        "uev2.loc=abc; Domain=postmates.com; Path=/; Secure",
        "jwt-session=xyz; Path=/; HttpOnly",
    ]
    assert lines_to_jar(lines) == {"uev2.loc": "abc", "jwt-session": "xyz"}


def test_lines_to_jar_later_line_wins():
    assert lines_to_jar(["a=1; Path=/", "a=2; Path=/"]) == {"a": "2"}


def test_lines_to_jar_splits_on_first_equals():
    assert lines_to_jar(["token=a=b==; Path=/"]) == {"token": "a=b=="}


def test_lines_to_jar_empty_input():
    assert lines_to_jar([]) == {}
    assert lines_to_jar(None) == {}


def test_lines_to_jar_empty_value():
    assert lines_to_jar(["flag=; Path=/"]) == {"flag": ""}


def test_lines_to_jar_keeps_names_untrimmed():
    assert lines_to_jar([" padded =v; Path=/"]) == {" padded ": "v"}


def test_lines_to_jar_malformed_line():
    with pytest.raises(MalformedCookieError) as exc_info:
        lines_to_jar(["good=1", "no-equals-here; Path=/"])
    assert exc_info.value.line == "no-equals-here; Path=/"
    assert isinstance(exc_info.value, ValueError)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def test_jar_to_header_string_trailing_separator():
    assert jar_to_header_string({"a": "1", "b": "2"}) == "a=1; b=2; "


def test_jar_to_header_string_empty():
    assert jar_to_header_string({}) == ""
    assert jar_to_header_string(None) == ""


def test_jar_round_trip():
    jar = {"uev2.loc": "%22x%22", "jwt-session": "s=1", "empty": ""}
    assert lines_to_jar(jar_to_lines(jar)) == jar


# ---------------------------------------------------------------------------
# merge_jars
# ---------------------------------------------------------------------------

def test_merge_last_write_wins():
    a = {"k": "old", "only_a": "1"}
    b = {"k": "new", "only_b": "2"}
    assert merge_jars(a, b) == {"k": "new", "only_a": "1", "only_b": "2"}


def test_merge_does_not_mutate_inputs():
    a = {"k": "old"}
    b = {"k": "new"}
    merge_jars(a, b)
    assert a == {"k": "old"}
    assert b == {"k": "new"}


def test_merge_skips_none():
    assert merge_jars({"a": "1"}, None, {}) == {"a": "1"}


# ---------------------------------------------------------------------------
# encode_location_for_cookie
# ---------------------------------------------------------------------------

def test_encode_location_exact_format():
    encoded = encode_location_for_cookie({"a": "x y", "b": 'q"w'})
    assert encoded == "{%22a%22:%22xy%22,%22b%22:%22q%22w%22}"


def test_encode_location_has_no_forbidden_characters():
    encoded = encode_location_for_cookie(
        {"title": "123 Main St", "note": 'ring "twice"\tthen\nwait', "path": "a\\b"}
    )
    for char in (" ", "\t", "\n", "\\", '"'):
        assert char not in encoded


def test_encode_location_recovers_json():
    location = {
        "address": {"address1": "Market", "city": "SanFrancisco"},
        "latitude": 37.7749,
        "longitude": -122.4194,
        "reference": "ChIJ",
    }
    encoded = encode_location_for_cookie(location)
    assert json.loads(encoded.replace("%22", '"')) == location


def test_encode_location_is_deterministic():
    location = {"id": "place-1", "provider": "google_places"}
    assert encode_location_for_cookie(location) == encode_location_for_cookie(location)


def test_encode_location_from_string():
    raw = '{\n\t"a": "b"\n}'
    assert encode_location_for_cookie(raw, is_string=True) == "{%22a%22:%22b%22}"


def test_encode_location_keeps_non_ascii():
    assert encode_location_for_cookie({"city": "Zürich"}) == "{%22city%22:%22Zürich%22}"


# ---------------------------------------------------------------------------
# rewrite_domain
# ---------------------------------------------------------------------------

def test_rewrite_domain():
    lines = ["a=1; Domain=postmates.com; Path=/", "b=2; Path=/"]
    assert rewrite_domain(lines, "postmates.com", "cart.example.test") == [
        "a=1; Domain=cart.example.test; Path=/",
        "b=2; Path=/",
    ]


def test_rewrite_domain_first_occurrence_only():
    line = "ref=postmates.com; Domain=postmates.com"
    assert rewrite_domain([line], "postmates.com", "x.test") == ["ref=x.test; Domain=postmates.com"]


def test_rewrite_domain_without_target_is_noop():
    lines = ["a=1; Domain=postmates.com"]
    assert rewrite_domain(lines, "postmates.com", "") == lines
    assert rewrite_domain(None, "postmates.com", "x.test") == []
