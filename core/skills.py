"""
Skill directory discovery.

A skill is a directory containing a SKILL.md marker. Directories without the
marker are not skill locations and are ignored.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List

from core.models import SKILL_MARKER, SkillSpec

DISABLED_DIR = '.disabled'
REPO_SKILLS_DIR = 'skills'


@dataclass(frozen=True)
class SkillLocation:
    """A skill installed in one host's skill directory."""

    host: str
    scope: str
    name: str
    dir: Path


def is_skill_dir(path: Path) -> bool:
    return (Path(path) / SKILL_MARKER).is_file()


def list_skill_dirs(base_dir: Path, host: str, scope: str) -> List[SkillLocation]:
    base_dir = Path(base_dir)
    if not base_dir.is_dir():
        return []
    found = []
    for child in sorted(base_dir.iterdir()):
        if child.is_dir() and is_skill_dir(child):
            found.append(SkillLocation(host=host, scope=scope, name=child.name, dir=child))
    return found


def scan_repo_skills(repo_root: Path, skills_dir: str = REPO_SKILLS_DIR) -> List[SkillSpec]:
    """Repo convention: skills/<name>/SKILL.md becomes a repo-scoped SkillSpec."""
    base = Path(repo_root) / skills_dir
    return [
        SkillSpec(name=loc.name, enabled=True, scope='repo', path=f"{skills_dir}/{loc.name}")
        for loc in list_skill_dirs(base, host='repo', scope='repo')
    ]
