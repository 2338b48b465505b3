import json

import pytest
from PIL import Image

from alticon_sync import iconset
from alticon_sync.catalog import ICON_SPECS
from alticon_sync.errors import (
    DecodeError,
    ManifestError,
    MissingSourceEntry,
    NoSourceImages,
    SourceFileMissing,
)
from alticon_sync.types import Mode


def _write_icon(path, color=(255, 0, 0)) -> None:
    fmt = "JPEG" if path.suffix.lower() == ".jpg" else "PNG"
    Image.new("RGB", (1024, 1024), color).save(path, format=fmt)


def _manifest(set_dir) -> dict:
    return json.loads((set_dir / "Contents.json").read_text())


def test_materialize_creates_set_with_provisional_manifest(tmp_path) -> None:
    icons = tmp_path / "icons"
    assets = tmp_path / "Assets.xcassets"
    icons.mkdir()
    assets.mkdir()
    _write_icon(icons / "Halloween.png")
    (icons / "README.txt").write_text("ignored")

    logs: list[str] = []
    created = iconset.materialize(Mode.ADD, str(icons), str(assets), log=logs.append)

    set_dir = assets / "Halloween.appiconset"
    assert created == [str(set_dir)]
    assert (set_dir / "Halloween.png").read_bytes() == (icons / "Halloween.png").read_bytes()
    assert _manifest(set_dir) == {
        "images": [
            {
                "filename": "Halloween.png",
                "idiom": "universal",
                "platform": "ios",
                "size": "1024x1024",
            }
        ],
        "info": {"author": "xcode", "version": 1},
    }
    assert "Copied file: Halloween.png" in logs


def test_materialize_add_skips_existing_set(tmp_path) -> None:
    icons = tmp_path / "icons"
    assets = tmp_path / "Assets.xcassets"
    icons.mkdir()
    _write_icon(icons / "Winter.jpg")
    existing = assets / "Winter.appiconset"
    existing.mkdir(parents=True)
    (existing / "keep.txt").write_text("user file")

    logs: list[str] = []
    created = iconset.materialize(Mode.ADD, str(icons), str(assets), log=logs.append)

    assert created == []
    assert (existing / "keep.txt").read_text() == "user file"
    assert not (existing / "Contents.json").exists()
    assert "Icon set exists, skip copying: Winter.appiconset" in logs


def test_materialize_replace_recreates_existing_set(tmp_path) -> None:
    icons = tmp_path / "icons"
    assets = tmp_path / "Assets.xcassets"
    icons.mkdir()
    _write_icon(icons / "Winter.jpg")
    existing = assets / "Winter.appiconset"
    existing.mkdir(parents=True)
    (existing / "stale.png").write_bytes(b"old")

    created = iconset.materialize(Mode.REPLACE, str(icons), str(assets))

    assert created == [str(existing)]
    assert sorted(p.name for p in existing.iterdir()) == ["Contents.json", "Winter.jpg"]


def test_materialize_without_sources_fails(tmp_path) -> None:
    icons = tmp_path / "icons"
    icons.mkdir()
    (icons / "notes.txt").write_text("x")

    with pytest.raises(NoSourceImages):
        iconset.materialize(Mode.ADD, str(icons), str(tmp_path))


def test_materialize_rejects_remove_all(tmp_path) -> None:
    with pytest.raises(ValueError):
        iconset.materialize(Mode.REMOVE_ALL, str(tmp_path), str(tmp_path))


def test_cleanup_keeps_primary_set(tmp_path) -> None:
    assets = tmp_path / "Assets.xcassets"
    for rel in ("AppIcon.appiconset", "Old.appiconset", "Group/Other.appiconset"):
        d = assets / rel
        d.mkdir(parents=True)
        (d / "Contents.json").write_text("{}")

    logs: list[str] = []
    removed = iconset.cleanup(str(assets), log=logs.append)

    assert removed == 2
    assert (assets / "AppIcon.appiconset").is_dir()
    assert not (assets / "Old.appiconset").exists()
    assert not (assets / "Group" / "Other.appiconset").exists()
    assert logs[-1] == "Cleanup done. Removed 2 alt icon set(s)"


def test_resync_generates_all_sizes_and_prunes_stale_files(tmp_path) -> None:
    icons = tmp_path / "icons"
    assets = tmp_path / "Assets.xcassets"
    icons.mkdir()
    _write_icon(icons / "Halloween.png")
    iconset.materialize(Mode.ADD, str(icons), str(assets))
    set_dir = assets / "Halloween.appiconset"
    (set_dir / "icon-99x99@2x.png").write_bytes(b"leftover")
    (set_dir / "notes.txt").write_text("manual edit")

    images = iconset.resync(str(set_dir))

    assert len(images) == len(ICON_SPECS) == 16
    manifest = _manifest(set_dir)
    assert len(manifest["images"]) == 16
    assert manifest["images"][-1] == {
        "filename": "Halloween.png",
        "idiom": "universal",
        "platform": "ios",
        "size": "1024x1024",
    }
    assert manifest["images"][0]["filename"] == "icon-20x20@2x.png"
    assert manifest["images"][0]["scale"] == "2x"

    referenced = {e["filename"] for e in manifest["images"]}
    on_disk = {p.name for p in set_dir.iterdir()}
    assert on_disk == referenced | {"Contents.json"}

    with Image.open(set_dir / "icon-83_5x83_5@2x.png") as img:
        assert img.size == (167, 167)


def test_resync_is_byte_identical_on_rerun(tmp_path) -> None:
    icons = tmp_path / "icons"
    assets = tmp_path / "Assets.xcassets"
    icons.mkdir()
    _write_icon(icons / "Winter.jpg", color=(0, 80, 200))
    iconset.materialize(Mode.ADD, str(icons), str(assets))
    set_dir = assets / "Winter.appiconset"

    iconset.resync(str(set_dir))
    first = {p.name: p.read_bytes() for p in set_dir.iterdir()}
    iconset.resync(str(set_dir))
    second = {p.name: p.read_bytes() for p in set_dir.iterdir()}

    assert first == second


def test_resync_requires_source_entry(tmp_path) -> None:
    set_dir = tmp_path / "Bad.appiconset"
    set_dir.mkdir()
    (set_dir / "Contents.json").write_text(
        json.dumps({"images": [{"idiom": "universal", "size": "60x60", "scale": "2x"}]})
    )
    with pytest.raises(MissingSourceEntry):
        iconset.resync(str(set_dir))


def test_find_source_filename_skips_scaled_entries(tmp_path) -> None:
    manifest = {
        "images": [
            {"filename": "scaled.png", "idiom": "universal", "scale": "1x", "size": "1024x1024"},
            {"filename": "Winter.jpg", "idiom": "ios-marketing", "size": "1024x1024"},
        ]
    }
    assert iconset.find_source_filename(manifest, str(tmp_path)) == "Winter.jpg"

    manifest["images"].pop()
    with pytest.raises(MissingSourceEntry):
        iconset.find_source_filename(manifest, str(tmp_path))


def test_resync_requires_source_file(tmp_path) -> None:
    set_dir = tmp_path / "Bad.appiconset"
    set_dir.mkdir()
    (set_dir / "Contents.json").write_text(
        json.dumps({"images": [{"filename": "gone.png", "idiom": "universal", "size": "1024x1024"}]})
    )
    with pytest.raises(SourceFileMissing):
        iconset.resync(str(set_dir))


def test_resync_rejects_invalid_manifest(tmp_path) -> None:
    set_dir = tmp_path / "Bad.appiconset"
    set_dir.mkdir()
    (set_dir / "Contents.json").write_text("{not json")
    with pytest.raises(ManifestError):
        iconset.resync(str(set_dir))


def test_resync_rejects_undecodable_source(tmp_path) -> None:
    set_dir = tmp_path / "Bad.appiconset"
    set_dir.mkdir()
    (set_dir / "src.png").write_bytes(b"garbage")
    (set_dir / "Contents.json").write_text(
        json.dumps({"images": [{"filename": "src.png", "idiom": "universal", "size": "1024x1024"}]})
    )
    with pytest.raises(DecodeError):
        iconset.resync(str(set_dir))


def test_resync_all_parallel_matches_sequential(tmp_path) -> None:
    icons = tmp_path / "icons"
    icons.mkdir()
    for name in ("A.png", "B.png", "C.jpg"):
        _write_icon(icons / name)

    seq_assets = tmp_path / "seq"
    par_assets = tmp_path / "par"
    iconset.materialize(Mode.ADD, str(icons), str(seq_assets))
    iconset.materialize(Mode.ADD, str(icons), str(par_assets))

    seq = iconset.resync_all(sorted(str(p) for p in seq_assets.iterdir()), jobs=1)
    par = iconset.resync_all(sorted(str(p) for p in par_assets.iterdir()), jobs=3)

    assert [len(v) for v in seq.values()] == [16, 16, 16]
    assert list(seq.values()) == list(par.values())
    for name in ("A.appiconset", "B.appiconset", "C.appiconset"):
        assert _manifest(seq_assets / name) == _manifest(par_assets / name)
