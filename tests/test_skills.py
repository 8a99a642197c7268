"""Tests for skill discovery and the catalog."""

from __future__ import annotations

from pathlib import Path

import pytest

from ohmyskill.skills.catalog import SkillCatalog
from ohmyskill.skills.scanner import (
    Skill,
    default_skills_dir,
    parse_frontmatter,
    scan_skills,
)


def _write_skill(
    root: Path, dirname: str, body: str, filename: str = "skill.md"
) -> Path:
    skill_dir = root / dirname
    skill_dir.mkdir(parents=True, exist_ok=True)
    path = skill_dir / filename
    path.write_text(body, encoding="utf-8")
    return path


class TestParseFrontmatter:
    def test_basic(self) -> None:
        meta = parse_frontmatter("---\nname: pdf\ndescription: Work with PDFs\n---\nBody")
        assert meta == {"name": "pdf", "description": "Work with PDFs"}

    def test_keys_lowercased(self) -> None:
        meta = parse_frontmatter("---\nName: pdf\n---\n")
        assert meta == {"name": "pdf"}

    def test_missing_opening_marker(self) -> None:
        assert parse_frontmatter("name: pdf\n---\n") == {}

    def test_unterminated_block(self) -> None:
        assert parse_frontmatter("---\nname: pdf\n") == {}

    def test_invalid_yaml(self) -> None:
        assert parse_frontmatter("---\nname: [unclosed\n---\n") == {}

    def test_non_mapping(self) -> None:
        assert parse_frontmatter("---\n- a\n- b\n---\n") == {}


class TestScanSkills:
    def test_discovers_sorted_skills(self, tmp_path: Path) -> None:
        _write_skill(tmp_path, "zeta", "---\nname: zeta\ndescription: Last\n---\n")
        _write_skill(tmp_path, "alpha", "---\nname: alpha\ndescription: First\n---\n")
        skills = scan_skills(tmp_path)
        assert [s.name for s in skills] == ["alpha", "zeta"]
        assert skills[0].id == "alpha"
        assert skills[0].description == "First"
        assert skills[0].directory == tmp_path / "alpha"

    def test_uppercase_skill_file(self, tmp_path: Path) -> None:
        _write_skill(tmp_path, "pdf", "---\nname: pdf\n---\n", filename="SKILL.md")
        assert [s.name for s in scan_skills(tmp_path)] == ["pdf"]

    def test_missing_description_gets_default(self, tmp_path: Path) -> None:
        _write_skill(tmp_path, "pdf", "---\nname: pdf\n---\n")
        assert scan_skills(tmp_path)[0].description == "No description"

    def test_skips_invalid_entries(self, tmp_path: Path) -> None:
        _write_skill(tmp_path, "no-name", "---\ndescription: nameless\n---\n")
        _write_skill(tmp_path, "no-front", "just text\n")
        (tmp_path / "empty-dir").mkdir()
        (tmp_path / "stray.md").write_text("---\nname: stray\n---\n")
        _write_skill(tmp_path, ".hidden", "---\nname: hidden\n---\n")
        _write_skill(tmp_path, "good", "---\nname: good\n---\n")
        assert [s.name for s in scan_skills(tmp_path)] == ["good"]

    def test_missing_root(self, tmp_path: Path) -> None:
        assert scan_skills(tmp_path / "absent") == []

    def test_default_root(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))
        assert default_skills_dir() == tmp_path / ".claude" / "skills"
        _write_skill(tmp_path / ".claude" / "skills", "pdf", "---\nname: pdf\n---\n")
        assert [s.name for s in scan_skills()] == ["pdf"]


class TestSkill:
    def test_selector_and_display_name(self, tmp_path: Path) -> None:
        skill = Skill(id="x", name="code-review", directory=tmp_path)
        assert skill.selector == "/code-review"
        assert skill.display_name == "Code Review"


class TestCatalog:
    @pytest.fixture
    def catalog(self, tmp_path: Path) -> SkillCatalog:
        return SkillCatalog(
            [
                Skill(id="pdf", name="pdf", description="Fill PDF forms", directory=tmp_path),
                Skill(
                    id="review",
                    name="code-review",
                    description="Review a diff",
                    directory=tmp_path,
                ),
            ]
        )

    def test_get(self, catalog: SkillCatalog) -> None:
        assert catalog.get("review") is not None
        assert catalog.get("code-review") is None

    def test_find_by_name_case_insensitive(self, catalog: SkillCatalog) -> None:
        skill = catalog.find_by_name("Code-Review")
        assert skill is not None
        assert skill.id == "review"

    def test_filter_matches_name_or_description(self, catalog: SkillCatalog) -> None:
        assert [s.id for s in catalog.filter("PDF")] == ["pdf"]
        assert [s.id for s in catalog.filter("diff")] == ["review"]
        assert catalog.filter("zzz") == []

    def test_empty_query_matches_all(self, catalog: SkillCatalog) -> None:
        assert len(catalog.filter("")) == 2
        assert len(catalog) == 2
