"""
File primitives shared by the unified spec store and the host adapters.

Writes are whole-file and atomic: content goes to a temporary sibling that is
then renamed over the target. Before an existing file is overwritten a
timestamped sibling copy is made; backups are never overwritten or pruned.

Parsers hand back plain structures (a tomlkit document for TOML so untouched
tables keep their formatting). Parse failures raise MalformedConfigError
carrying the path and the parser message.
"""

import json
import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import pyjson5
import tomlkit
import yaml
from tomlkit.exceptions import TOMLKitError

from core.errors import MalformedConfigError

logger = logging.getLogger(__name__)


def write_text_atomic(path: Path, content: str):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fh = tempfile.NamedTemporaryFile(
        'w', encoding='utf-8', dir=path.parent,
        prefix=f".{path.name}.", suffix='.tmp', delete=False,
    )
    tmp = Path(fh.name)
    try:
        with fh:
            fh.write(content)
        if path.exists():
            shutil.copymode(path, tmp)
        os.replace(tmp, path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise


def backup_file(path: Path) -> Optional[Path]:
    """Copy `path` to `<path>.bak.<UTC timestamp>`; None when there is nothing to back up."""
    path = Path(path)
    if not path.is_file():
        return None
    stamp = datetime.now(timezone.utc).strftime('%Y%m%dT%H%M%S%fZ')
    backup = path.with_name(f"{path.name}.bak.{stamp}")
    counter = 1
    while backup.exists():
        backup = path.with_name(f"{path.name}.bak.{stamp}.{counter}")
        counter += 1
    shutil.copy2(path, backup)
    logger.debug("Backed up %s -> %s", path, backup)
    return backup


def _read_raw(path: Path) -> str:
    try:
        return Path(path).read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        raise MalformedConfigError(path, str(e)) from e


def _read_text(path: Path) -> str:
    raw = _read_raw(path)
    return raw if raw.strip() else '{}'


def _require_mapping(data: Any, path: Path) -> dict:
    if not isinstance(data, dict):
        raise MalformedConfigError(path, "root must be an object")
    return data


def read_json(path: Path) -> dict:
    try:
        data = json.loads(_read_text(path))
    except json.JSONDecodeError as e:
        raise MalformedConfigError(path, str(e)) from e
    return _require_mapping(data, path)


def read_jsonc(path: Path) -> dict:
    """JSON with comments and trailing commas (opencode.jsonc)."""
    try:
        data = pyjson5.decode(_read_text(path))
    except pyjson5.Json5Exception as e:
        raise MalformedConfigError(path, str(e)) from e
    return _require_mapping(data, path)


def read_toml(path: Path) -> tomlkit.TOMLDocument:
    raw = _read_raw(path)
    try:
        return tomlkit.parse(raw)
    except TOMLKitError as e:
        raise MalformedConfigError(path, str(e)) from e


def read_yaml(path: Path) -> Any:
    raw = _read_raw(path)
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise MalformedConfigError(path, str(e)) from e


def dump_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + '\n'


def dump_toml(doc: Any) -> str:
    return tomlkit.dumps(doc)


def dump_yaml(data: Any) -> str:
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)


def copy_tree(src: Path, dest: Path):
    """Replace `dest` with a fresh copy of the directory `src`."""
    if dest.exists():
        shutil.rmtree(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copytree(src, dest)


def move_tree(src: Path, dest: Path):
    """Move directory `src` to `dest`, replacing anything already at `dest`."""
    if dest.exists():
        shutil.rmtree(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(src), str(dest))
