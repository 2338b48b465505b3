import plistlib

from alticon_sync.plist_edit import (
    detect_plist_format,
    get_value,
    load_plist_with_format,
    save_plist,
    set_value,
)


def test_set_value_creates_containers() -> None:
    obj: dict = {}
    set_value(obj, "A:B:0:C", "v")
    assert obj == {"A": {"B": [{"C": "v"}]}}


def test_set_value_keeps_sibling_keys() -> None:
    obj: dict = {"CFBundleIcons": {"CFBundlePrimaryIcon": {"CFBundleIconName": "AppIcon"}}}
    set_value(obj, "CFBundleIcons:CFBundlePrimaryIcon:UIPrerenderedIcon", False)
    assert obj["CFBundleIcons"]["CFBundlePrimaryIcon"] == {
        "CFBundleIconName": "AppIcon",
        "UIPrerenderedIcon": False,
    }


def test_get_value_missing_returns_default() -> None:
    obj: dict = {"A": {"B": [1, 2]}}
    assert get_value(obj, "A:B:1") == 2
    assert get_value(obj, "A:B:5") is None
    assert get_value(obj, "A:C", default={}) == {}


def test_save_plist_preserves_binary_format(tmp_path) -> None:
    path = tmp_path / "Info.plist"
    path.write_bytes(plistlib.dumps({"B": 1, "A": 2}, fmt=plistlib.FMT_BINARY, sort_keys=False))

    obj, fmt = load_plist_with_format(str(path))
    assert fmt == plistlib.FMT_BINARY
    obj["C"] = 3
    save_plist(str(path), obj, fmt)

    data = path.read_bytes()
    assert detect_plist_format(data) == plistlib.FMT_BINARY
    assert list(plistlib.loads(data)) == ["B", "A", "C"]


def test_save_plist_writes_xml_by_default(tmp_path) -> None:
    path = tmp_path / "Info.plist"
    save_plist(str(path), {"Z": "z", "A": "a"})
    data = path.read_bytes()
    assert data.startswith(b"<?xml")
    # 键顺序保持插入顺序。
    assert data.index(b"<key>Z</key>") < data.index(b"<key>A</key>")
