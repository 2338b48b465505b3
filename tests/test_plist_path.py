import pytest

from alticon_sync.plist_path import join_key_path, parse_key_path


def test_parse_key_path_simple() -> None:
    assert parse_key_path("CFBundleIcons:CFBundlePrimaryIcon") == [
        "CFBundleIcons",
        "CFBundlePrimaryIcon",
    ]


def test_parse_key_path_with_indices() -> None:
    assert parse_key_path("CFBundleIcons:CFBundlePrimaryIcon:CFBundleIconFiles:0") == [
        "CFBundleIcons",
        "CFBundlePrimaryIcon",
        "CFBundleIconFiles",
        0,
    ]


def test_parse_key_path_leading_colon() -> None:
    assert parse_key_path(":A:0") == ["A", 0]


def test_parse_key_path_rejects_empty_elements() -> None:
    with pytest.raises(ValueError):
        parse_key_path("A::B")
    with pytest.raises(ValueError):
        parse_key_path(":")


def test_join_key_path_round_trips_through_parse() -> None:
    path = join_key_path("CFBundleIcons", "CFBundleAlternateIcons")
    assert path == "CFBundleIcons:CFBundleAlternateIcons"
    assert parse_key_path(path) == ["CFBundleIcons", "CFBundleAlternateIcons"]


def test_join_key_path_rejects_ambiguous_elements() -> None:
    with pytest.raises(ValueError):
        join_key_path("A:B")
    with pytest.raises(ValueError):
        join_key_path("A", "2024")
