"""Small file-system helpers.

Writes replace the whole file in one call; a failure is raised as
FileWriteError and nothing is retried.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from candi.common.exceptions import FileWriteError

logger = logging.getLogger(__name__)

PathLike = str | Path


def get_file(path: PathLike) -> str:
    """Read a UTF-8 text file."""
    return Path(path).read_text(encoding="utf-8")


def get_obj_from_file(path: PathLike) -> Any:
    """Read a JSON file."""
    return json.loads(get_file(path))


def write_file(path: PathLike, text: str) -> None:
    """Write ``text`` to ``path``, replacing any existing content.

    Raises:
        FileWriteError: If the file cannot be written.
    """
    try:
        Path(path).write_text(text, encoding="utf-8")
    except OSError as e:
        raise FileWriteError(str(path), e) from e
    logger.debug("Wrote %d characters to %s", len(text), path)


def write_json(path: PathLike, obj: Any, pretty: bool = True) -> None:
    """Serialise ``obj`` as JSON (tab-indented when ``pretty``)."""
    if pretty:
        text = json.dumps(obj, indent="\t", ensure_ascii=False)
    else:
        text = json.dumps(obj, ensure_ascii=False)
    write_file(path, text)


def mk_dir(path: PathLike) -> None:
    """Create a directory (and parents) if it does not exist."""
    Path(path).mkdir(parents=True, exist_ok=True)


def exists(path: PathLike) -> bool:
    return Path(path).exists()
