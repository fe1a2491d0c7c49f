"""
Loading of ``.env`` files into the process environment.

Variables that are already set (for example by a container orchestrator)
always win over values from the file.
"""

import io
import logging
import os
from pathlib import Path
from typing import Dict, List, MutableMapping, Optional, Union

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

ENV_FILE_NAME = ".env"


def default_env_path() -> Path:
    """Path of the ``.env`` file in the current working directory."""
    return Path.cwd() / ENV_FILE_NAME


def _read_decodable_text(env_path: Path) -> str:
    """File contents with lines that are not valid UTF-8 dropped."""
    lines: List[str] = []
    with open(env_path, "rb") as f:
        for number, raw in enumerate(f, start=1):
            try:
                lines.append(raw.decode("utf-8-sig" if number == 1 else "utf-8"))
            except UnicodeDecodeError:
                logger.warning(f"Skipping line {number} of {env_path}: not valid UTF-8")
    return "".join(lines)


def load_env_file(path: Optional[Union[str, Path]] = None,
                  environ: Optional[MutableMapping[str, str]] = None) -> Dict[str, str]:
    """
    Merge ``KEY=VALUE`` pairs from a dotenv file into the environment.

    Blank lines and comments are ignored, lines that cannot be parsed or
    decoded are skipped, and keys that are already present are left
    untouched, so loading the same file twice is a no-op.

    Args:
        path: File to read, defaults to ``.env`` in the working directory
        environ: Mapping to update, defaults to ``os.environ``

    Returns:
        The key/value pairs that were applied
    """
    env_path = Path(path) if path is not None else default_env_path()
    target = os.environ if environ is None else environ

    if not env_path.is_file():
        logger.debug(f"No env file at {env_path}, using process environment only")
        return {}

    stream = io.StringIO(_read_decodable_text(env_path))
    applied: Dict[str, str] = {}
    for key, value in dotenv_values(stream=stream, interpolate=False).items():
        # Lines without '=' parse to a None value
        if not key or value is None:
            continue
        if key in target:
            continue
        target[key] = value
        applied[key] = value

    logger.info(f"Loaded {len(applied)} variable(s) from {env_path}")
    return applied
