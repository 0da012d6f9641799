from __future__ import annotations

from pathlib import Path

import pytest

from buildgraph.changelog import derive_version, load_changelog, parse_release_notes, parse_version, resolve
from buildgraph.errors import ConfigurationError, EmptyChangelogError, ParseError
from buildgraph.model import CIContext, Configuration, ReleaseNote, SemVer


def test_parse_version() -> None:
    assert parse_version("1.2.3") == SemVer(1, 2, 3)
    assert parse_version("1.2") == SemVer(1, 2, 0)
    assert parse_version("1.0.0-beta.2") == SemVer(1, 0, 0, "beta.2")
    assert parse_version("1.0.0+build.7") == SemVer(1, 0, 0)


def test_parse_version_rejects_garbage() -> None:
    assert parse_version("1") is None
    assert parse_version("1.x") is None
    assert parse_version("01.2.3") is None
    assert parse_version("1.2.3.4") is None


def test_semver_str() -> None:
    assert str(SemVer(1, 2, 3)) == "1.2.3"
    assert str(SemVer(1, 2, 3, "rc.1")) == "1.2.3-rc.1"


class TestResolve:
    def test_newest_first(self) -> None:
        text = "# 1.2.0\n\n- two\n\n# 1.1.0\n\n- one\n- uno\n"
        releases, current = resolve(text)

        assert [str(r.version) for r in releases] == ["1.2.0", "1.1.0"]
        assert current == ReleaseNote(SemVer(1, 2, 0), ("- two",))
        assert releases[1].notes == ("- one", "- uno")

    def test_document_order_trusted(self) -> None:
        releases, current = resolve("# 0.9.0\n# 1.0.0\n")
        assert current.version == SemVer(0, 9, 0)
        assert len(releases) == 2

    def test_single_entry(self) -> None:
        releases, current = resolve("# 0.1.0\n\nFirst release.\n")
        assert current.version == SemVer(0, 1, 0)
        assert current.notes == ("First release.",)
        assert releases == (current,)
        assert releases[1:] == ()

    def test_preamble_ignored(self) -> None:
        text = "# Changelog\n\nAll notable changes.\n\n## [Unreleased]\n\n## [1.4.0] - 2024-02-01\n- thing\n"
        releases, current = resolve(text)
        assert len(releases) == 1
        assert current.version == SemVer(1, 4, 0)
        assert current.notes == ("- thing",)

    def test_header_keywords(self) -> None:
        text = "### New in 2.0.0 (Released 2024/01/01)\n* a\n### Version v1.9\n* b\n"
        releases = parse_release_notes(text)
        assert [r.version for r in releases] == [SemVer(2, 0, 0), SemVer(1, 9, 0)]

    def test_prerelease_header(self) -> None:
        _releases, current = resolve("# 1.0.0-alpha\n")
        assert current.version == SemVer(1, 0, 0, "alpha")

    def test_subsection_headings_kept_as_notes(self) -> None:
        _releases, current = resolve("# 1.0.0\n\n## Bug fixes\n\n- fixed\n")
        assert current.notes == ("## Bug fixes", "- fixed")

    def test_empty_text(self) -> None:
        with pytest.raises(EmptyChangelogError):
            resolve("")

    def test_no_release_headers(self) -> None:
        with pytest.raises(EmptyChangelogError):
            resolve("# Changelog\n\nNothing released yet.\n")

    def test_malformed_version(self) -> None:
        with pytest.raises(ParseError) as exc:
            resolve("# 1.0.0\n\n# 1.2.x\n")
        assert exc.value.line_no == 3
        assert "1.2.x" in str(exc.value)

    def test_four_part_version_rejected(self) -> None:
        with pytest.raises(ParseError):
            resolve("# 1.2.3.4\n")

    def test_build_metadata_dropped(self) -> None:
        _releases, current = resolve("# 1.2.3+build.7\n")
        assert str(current.version) == "1.2.3"

    @pytest.mark.parametrize("heading", ["## 3rd-party updates", "## 2 breaking changes", "### v2 roadmap"])
    def test_numbered_subheadings_kept_as_notes(self, heading: str) -> None:
        releases, current = resolve(f"# 1.2.3\n\n{heading}\n\n- bumped x\n")
        assert len(releases) == 1
        assert current.notes == (heading, "- bumped x")

    def test_numbered_heading_in_preamble_ignored(self) -> None:
        _releases, current = resolve("# 2 things to know\n\n# 0.3.0\n- first\n")
        assert current.version == SemVer(0, 3, 0)
        assert current.notes == ("- first",)


class TestLoadChangelog:
    def test_reads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "CHANGELOG.md"
        path.write_text("# 3.1.4\n- pi\n", encoding="utf-8")
        _releases, current = load_changelog(path)
        assert current.version == SemVer(3, 1, 4)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            load_changelog(tmp_path / "nope.md")

    def test_invalid_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "CHANGELOG.md"
        path.write_bytes(b"# 1.2.3\n\n- caf\xe9\n")
        with pytest.raises(ConfigurationError) as exc:
            load_changelog(path)
        assert "CHANGELOG.md" in str(exc.value)


class TestDeriveVersion:
    @pytest.mark.parametrize(
        ("configuration", "ci", "expected"),
        [
            (Configuration.RELEASE, CIContext(is_ci=True, run_number=42), "1.2.3-ci-42"),
            (Configuration.DEBUG, CIContext(), "1.2.3"),
            (Configuration.DEBUG, CIContext(is_ci=True, run_number=7), "1.2.3-alpha-7"),
            (Configuration.RELEASE, None, "1.2.3"),
        ],
    )
    def test_channels(self, configuration, ci, expected) -> None:
        assert derive_version("1.2.3", configuration, ci) == expected

    def test_accepts_semver(self) -> None:
        ci = CIContext(is_ci=True, run_number=1)
        assert derive_version(SemVer(2, 0, 0, "rc.1"), Configuration.RELEASE, ci) == "2.0.0-rc.1-ci-1"

    def test_ci_without_run_number(self) -> None:
        with pytest.raises(ConfigurationError):
            derive_version("1.2.3", Configuration.RELEASE, CIContext(is_ci=True))
