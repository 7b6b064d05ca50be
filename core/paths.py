"""
Filesystem roots used by every adapter.

The repository root and the operator's home directory are carried in a
HostEnvironment that is passed explicitly into adapters and orchestration.
from_process() is the only place that looks at the process cwd or the home
directory, so tests can build an environment from synthetic tmp_path roots.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union


@dataclass(frozen=True)
class HostEnvironment:
    """Resolved roots for one invocation."""

    repo_root: Path
    home: Path

    @classmethod
    def from_process(cls, repo_root: Optional[Union[str, Path]] = None) -> 'HostEnvironment':
        root = Path(repo_root).expanduser().resolve() if repo_root else Path.cwd()
        return cls(
            repo_root=root,
            home=Path.home(),
        )

    def display(self, path: Path) -> str:
        """Render a path relative to the repo root when it lives inside it."""
        try:
            return Path(path).relative_to(self.repo_root).as_posix()
        except ValueError:
            return str(path)

    def resolve_in_repo(self, path: Union[str, Path]) -> Path:
        """Resolve a repo-relative (or absolute) path."""
        p = Path(path).expanduser()
        return p if p.is_absolute() else self.repo_root / p
