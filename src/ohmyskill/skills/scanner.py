"""Skill discovery from ``<root>/<skill>/skill.md`` front matter."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field

from ohmyskill.constants import DEFAULT_SKILL_DESCRIPTION, DEFAULT_SKILLS_SUBDIR

logger = logging.getLogger(__name__)

SKILL_FILE_NAMES = ("skill.md", "SKILL.md")


class Skill(BaseModel):
    """A discovered skill definition."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Stable identifier (the skill's directory name)")
    name: str
    description: str = DEFAULT_SKILL_DESCRIPTION
    directory: Path

    @property
    def selector(self) -> str:
        """Token that scopes a prompt to this skill."""
        return f"/{self.name}"

    @property
    def display_name(self) -> str:
        return self.name.replace("-", " ").title()


def default_skills_dir() -> Path:
    return Path.home() / DEFAULT_SKILLS_SUBDIR


def scan_skills(root: Path | None = None) -> list[Skill]:
    """Return every valid skill under *root*, sorted by name.

    Missing roots yield an empty list; unreadable or malformed skill files
    are logged and skipped.
    """
    root = root if root is not None else default_skills_dir()
    if not root.is_dir():
        logger.info("skills directory not found: %s", root)
        return []

    skills: list[Skill] = []
    for skill_dir in sorted(root.iterdir()):
        if not skill_dir.is_dir() or skill_dir.name.startswith("."):
            continue
        skill_file = _find_skill_file(skill_dir)
        if skill_file is None:
            continue
        skill = _read_skill(skill_file, skill_dir)
        if skill is None:
            logger.warning("could not parse skill file: %s", skill_file)
            continue
        skills.append(skill)

    logger.info("found %d skills in %s", len(skills), root)
    return sorted(skills, key=lambda s: s.name)


def _find_skill_file(skill_dir: Path) -> Path | None:
    for name in SKILL_FILE_NAMES:
        candidate = skill_dir / name
        if candidate.is_file():
            return candidate
    return None


def _read_skill(skill_file: Path, skill_dir: Path) -> Skill | None:
    try:
        content = skill_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None

    metadata = parse_frontmatter(content)
    name = metadata.get("name")
    if not isinstance(name, str) or not name.strip():
        return None
    description = metadata.get("description")
    if not isinstance(description, str) or not description.strip():
        description = DEFAULT_SKILL_DESCRIPTION

    return Skill(
        id=skill_dir.name,
        name=name.strip(),
        description=description.strip(),
        directory=skill_dir,
    )


def parse_frontmatter(content: str) -> dict[str, object]:
    """Parse the YAML block between the leading ``---`` markers."""
    lines = content.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}

    for idx, line in enumerate(lines[1:], start=1):
        if line.strip() == "---":
            payload = "\n".join(lines[1:idx])
            try:
                parsed = yaml.safe_load(payload)
            except yaml.YAMLError:
                return {}
            if isinstance(parsed, dict):
                return {str(key).lower(): value for key, value in parsed.items()}
            return {}
    return {}
