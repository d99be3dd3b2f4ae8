"""Embedded dev-kit skills.

The six dev-kit workflow skills ship as package data under
`dev_kit/data/bundled/<name>/SKILL.md` and are installed from memory, so no
source checkout is needed at install time.
"""

from __future__ import annotations

from functools import cache
from importlib import resources

from dev_kit.errors import SkillNotFoundError
from dev_kit.types import SKILL_FILE, SkillBundle

# The six core dev-kit workflows, in the order they are used.
DEV_KIT_SKILLS: list[str] = [
    "dev-kit-init",
    "dev-kit-ticket",
    "dev-kit-research",
    "dev-kit-work",
    "dev-kit-refine",
    "dev-kit-review",
]

COMPATIBLE_AGENTS = frozenset({"claude-code", "github-copilot"})


@cache
def get_skill_content(skill_name: str) -> str:
    """Get the SKILL.md content of an embedded skill.

    Raises:
        SkillNotFoundError: If no embedded skill has that name.
    """
    if skill_name not in DEV_KIT_SKILLS:
        raise SkillNotFoundError(skill_name)
    resource = resources.files("dev_kit.data") / "bundled" / skill_name / SKILL_FILE
    return resource.read_text(encoding="utf-8")


def get_all_skill_names() -> list[str]:
    return list(DEV_KIT_SKILLS)


def get_dev_kit_skills() -> list[SkillBundle]:
    """Build bundles for every embedded skill."""
    return [
        SkillBundle.from_content(name, get_skill_content(name), COMPATIBLE_AGENTS)
        for name in get_all_skill_names()
    ]
