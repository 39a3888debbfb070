"""Tests for cdist.dispatch.release module."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from cdist.core.config import DEFAULT_ARCH_MAP, DEFAULT_OS_MAP
from cdist.core.result import Err, Ok
from cdist.dispatch.errors import ManifestError, MissingArtifact, UnmappedTarget
from cdist.dispatch.manifest import ArtifactManifest
from cdist.dispatch.release import (
    ReleaseArtifact,
    load_release_artifacts,
    prepare_release,
    release_platform_key,
)

TARGETS = [
    ("darwin", "amd64", ""),
    ("darwin", "arm64", ""),
    ("linux", "amd64", ""),
    ("linux", "arm64", ""),
    ("windows", "386", ".exe"),
    ("windows", "amd64", ".exe"),
]


def _write_builder_output(root: Path, targets: list[tuple[str, str, str]]) -> Path:
    """Lay out binaries and an artifacts.json the way the release builder does."""
    entries: list[dict[str, object]] = [
        {"name": "checksums.txt", "path": "dist/checksums.txt", "type": "Checksum"},
    ]
    for goos, goarch, ext in targets:
        rel = f"dist/changie_{goos}_{goarch}/changie{ext}"
        binary = root / rel
        binary.parent.mkdir(parents=True, exist_ok=True)
        binary.write_bytes(f"{goos}/{goarch}".encode())
        entries.append(
            {
                "name": f"changie{ext}",
                "path": rel,
                "goos": goos,
                "goarch": goarch,
                "type": "Binary",
                "extra": {"Ext": ext, "ID": "changie"},
            }
        )
        entries.append({"name": f"changie_{goos}_{goarch}.tar.gz", "path": "x", "type": "Archive"})
    artifacts = root / "dist" / "artifacts.json"
    artifacts.parent.mkdir(parents=True, exist_ok=True)
    artifacts.write_text(json.dumps(entries), encoding="utf-8")
    return artifacts


class TestLoadReleaseArtifacts:
    def test_keeps_only_binaries(self, tmp_path: Path) -> None:
        path = _write_builder_output(tmp_path, TARGETS)

        result = load_release_artifacts(path, root=tmp_path)

        assert isinstance(result, Ok)
        assert len(result.value) == len(TARGETS)
        first = result.value[0]
        assert first == ReleaseArtifact(
            goos="darwin",
            goarch="amd64",
            path=tmp_path / "dist" / "changie_darwin_amd64" / "changie",
            ext="",
        )

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_release_artifacts(tmp_path / "artifacts.json")
        assert isinstance(result, Err)
        assert isinstance(result.error, ManifestError)

    def test_not_an_array(self, tmp_path: Path) -> None:
        path = tmp_path / "artifacts.json"
        path.write_text("{}", encoding="utf-8")
        assert isinstance(load_release_artifacts(path), Err)

    def test_binary_without_goos(self, tmp_path: Path) -> None:
        path = tmp_path / "artifacts.json"
        path.write_text('[{"type": "Binary", "path": "x", "goarch": "amd64"}]', encoding="utf-8")

        result = load_release_artifacts(path)

        assert isinstance(result, Err)
        assert "goos" in result.error.message


class TestReleasePlatformKey:
    @pytest.mark.parametrize(
        ("goos", "goarch", "ext", "expected"),
        [
            ("darwin", "arm64", "", "darwin-arm64"),
            ("linux", "amd64", "", "linux-x64"),
            ("windows", "386", ".exe", "win32-ia32.exe"),
            ("windows", "amd64", ".exe", "win32-x64.exe"),
        ],
    )
    def test_maps_to_node_names(self, goos: str, goarch: str, ext: str, expected: str) -> None:
        artifact = ReleaseArtifact(goos, goarch, Path("x"), ext)
        assert release_platform_key(artifact, DEFAULT_OS_MAP, DEFAULT_ARCH_MAP) == Ok(expected)

    def test_unmapped(self) -> None:
        artifact = ReleaseArtifact("plan9", "amd64", Path("p"))
        result = release_platform_key(artifact, DEFAULT_OS_MAP, DEFAULT_ARCH_MAP)
        assert result == Err(UnmappedTarget("plan9", "amd64", "p"))


class TestPrepareRelease:
    def _load(self, root: Path) -> list[ReleaseArtifact]:
        result = load_release_artifacts(_write_builder_output(root, TARGETS), root=root)
        assert isinstance(result, Ok)
        return result.value

    def test_copies_every_binary_and_writes_manifest(self, tmp_path: Path) -> None:
        out = tmp_path / "npm" / "dist"

        result = prepare_release(
            self._load(tmp_path), out, os_map=DEFAULT_OS_MAP, arch_map=DEFAULT_ARCH_MAP
        )

        assert isinstance(result, Ok)
        report = result.value
        assert sorted(p.name for p in out.iterdir()) == sorted(
            [*ArtifactManifest.default().keys(), "manifest.json"]
        )
        assert (out / "win32-x64.exe").read_bytes() == b"windows/amd64"
        assert [p.key for p in report.prepared] == ArtifactManifest.default().keys()
        assert report.skipped == []

        manifest = ArtifactManifest.load(report.manifest_path)
        assert isinstance(manifest, Ok)
        assert dict(manifest.value.entries) == dict(ArtifactManifest.default().entries)

    def test_clean_removes_previous_release_only(self, tmp_path: Path) -> None:
        out = tmp_path / "out"
        out.mkdir()
        ArtifactManifest.from_mapping({"freebsd-x64": "freebsd-x64"}).save(out / "manifest.json")
        (out / "freebsd-x64").write_bytes(b"old")
        (out / "linux-x64").write_bytes(b"old")
        (out / "package.json").write_text("{}", encoding="utf-8")

        prepare_release(
            self._load(tmp_path), out, os_map=DEFAULT_OS_MAP, arch_map=DEFAULT_ARCH_MAP, workers=1
        )

        assert not (out / "freebsd-x64").exists()
        assert (out / "linux-x64").read_bytes() == b"linux/amd64"
        assert (out / "package.json").read_text(encoding="utf-8") == "{}"

    def test_clean_into_project_root_keeps_unrelated_files(self, tmp_path: Path) -> None:
        (tmp_path / "cdist.toml").write_text("", encoding="utf-8")
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "main.go").write_text("package main\n", encoding="utf-8")

        result = prepare_release(
            self._load(tmp_path), tmp_path, os_map=DEFAULT_OS_MAP, arch_map=DEFAULT_ARCH_MAP
        )

        assert isinstance(result, Ok)
        assert (tmp_path / "cdist.toml").exists()
        assert (tmp_path / "src" / "main.go").exists()
        assert (tmp_path / "dist" / "artifacts.json").exists()
        assert (tmp_path / "darwin-arm64").read_bytes() == b"darwin/arm64"

    def test_clean_keeps_sources_inside_output(self, tmp_path: Path) -> None:
        out = tmp_path / "out"
        out.mkdir()
        source = out / "linux-x64"
        source.write_bytes(b"fresh build")

        result = prepare_release(
            [ReleaseArtifact("linux", "amd64", source)],
            out,
            os_map=DEFAULT_OS_MAP,
            arch_map=DEFAULT_ARCH_MAP,
        )

        assert isinstance(result, Ok)
        assert source.read_bytes() == b"fresh build"

    def test_no_clean_keeps_output(self, tmp_path: Path) -> None:
        out = tmp_path / "out"
        out.mkdir()
        (out / "keep").write_bytes(b"x")

        prepare_release(
            self._load(tmp_path), out, os_map=DEFAULT_OS_MAP, arch_map=DEFAULT_ARCH_MAP, clean=False
        )

        assert (out / "keep").exists()

    def test_unmapped_targets_are_skipped(self, tmp_path: Path) -> None:
        artifacts = self._load(tmp_path)
        odd = tmp_path / "plan9-bin"
        odd.write_bytes(b"p9")
        artifacts.append(ReleaseArtifact("plan9", "amd64", odd))

        result = prepare_release(
            artifacts, tmp_path / "out", os_map=DEFAULT_OS_MAP, arch_map=DEFAULT_ARCH_MAP
        )

        assert isinstance(result, Ok)
        assert result.value.skipped == [UnmappedTarget("plan9", "amd64", str(odd))]
        assert len(result.value.prepared) == len(TARGETS)

    def test_missing_binary_fails_before_copying(self, tmp_path: Path) -> None:
        artifacts = self._load(tmp_path)
        artifacts[-1].path.unlink()
        out = tmp_path / "out"

        result = prepare_release(artifacts, out, os_map=DEFAULT_OS_MAP, arch_map=DEFAULT_ARCH_MAP)

        assert result == Err(MissingArtifact(path=artifacts[-1].path))
        assert not out.exists()

    def test_duplicate_key_fails(self, tmp_path: Path) -> None:
        artifacts = self._load(tmp_path)
        artifacts.append(artifacts[0])

        result = prepare_release(
            artifacts, tmp_path / "out", os_map=DEFAULT_OS_MAP, arch_map=DEFAULT_ARCH_MAP
        )

        assert isinstance(result, Err)
        assert "duplicate platform key darwin-x64" in result.error.message

    def test_custom_manifest_path_and_binary(self, tmp_path: Path) -> None:
        target = tmp_path / "meta" / "m.json"

        result = prepare_release(
            self._load(tmp_path),
            tmp_path / "out",
            os_map=DEFAULT_OS_MAP,
            arch_map=DEFAULT_ARCH_MAP,
            binary_name="tool",
            manifest_path=target,
        )

        assert isinstance(result, Ok)
        loaded = ArtifactManifest.load(target)
        assert isinstance(loaded, Ok)
        assert loaded.value.binary == "tool"
