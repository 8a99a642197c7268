"""Read-only skill catalog used to scope prompts."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from ohmyskill.skills.scanner import Skill


class SkillCatalog:
    """Lookup and filtering over a fixed list of skills."""

    def __init__(self, skills: Iterable[Skill] = ()) -> None:
        self._skills = list(skills)
        self._by_id = {skill.id: skill for skill in self._skills}

    def __iter__(self) -> Iterator[Skill]:
        return iter(self._skills)

    def __len__(self) -> int:
        return len(self._skills)

    def get(self, skill_id: str) -> Skill | None:
        return self._by_id.get(skill_id)

    def find_by_name(self, name: str) -> Skill | None:
        lowered = name.casefold()
        for skill in self._skills:
            if skill.name.casefold() == lowered:
                return skill
        return None

    def filter(self, query: str) -> list[Skill]:
        """Skills whose name or description contains *query* (case-insensitive).

        An empty query matches everything.
        """
        lowered = query.strip().casefold()
        if not lowered:
            return list(self._skills)
        return [
            skill
            for skill in self._skills
            if lowered in skill.name.casefold()
            or lowered in skill.description.casefold()
        ]
