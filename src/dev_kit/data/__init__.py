"""Embedded skill resources."""

from .skills import (
    DEV_KIT_SKILLS,
    get_all_skill_names,
    get_dev_kit_skills,
    get_skill_content,
)

__all__ = [
    "DEV_KIT_SKILLS",
    "get_all_skill_names",
    "get_dev_kit_skills",
    "get_skill_content",
]
