"""Load, save and initialize the unified spec YAML file."""

import logging
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from core.errors import SpecValidationError
from core.fileio import backup_file, dump_yaml, read_yaml, write_text_atomic
from core.merge import normalize_spec
from core.models import ToolchainSpec, empty_spec
from core.skills import REPO_SKILLS_DIR

logger = logging.getLogger(__name__)

DEFAULT_SPEC_PATH = 'mcp-skill-tool.yaml'


def _format_errors(exc: ValidationError) -> List[str]:
    errors = []
    for err in exc.errors():
        loc = '.'.join(str(part) for part in err.get('loc', ())) or '<root>'
        errors.append(f"{loc}: {err.get('msg')}")
    return errors


def parse_spec(data, path: Optional[Path] = None) -> ToolchainSpec:
    """Validate an already-parsed structure as a ToolchainSpec."""
    if data is None:
        data = {}
    try:
        return ToolchainSpec.model_validate(data)
    except ValidationError as e:
        raise SpecValidationError(path, _format_errors(e)) from e


def load_spec(path: Path) -> ToolchainSpec:
    path = Path(path)
    return parse_spec(read_yaml(path), path)


def save_spec(path: Path, spec: ToolchainSpec):
    """Normalize, back up the previous file and write atomically."""
    path = Path(path)
    content = dump_yaml(normalize_spec(spec).to_document())
    backup_file(path)
    write_text_atomic(path, content)
    logger.debug("Saved spec to %s", path)


def init_spec_if_missing(path: Path) -> bool:
    """Create an empty spec plus the conventional skills/ directory; True if created."""
    path = Path(path)
    if path.exists():
        return False
    save_spec(path, empty_spec())
    (path.parent / REPO_SKILLS_DIR).mkdir(parents=True, exist_ok=True)
    return True
