"""Skill discovery and catalog."""

from ohmyskill.skills.catalog import SkillCatalog
from ohmyskill.skills.scanner import Skill, default_skills_dir, scan_skills

__all__ = [
    "Skill",
    "SkillCatalog",
    "default_skills_dir",
    "scan_skills",
]
