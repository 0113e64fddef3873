"""Sources of raw iptables-save text."""
from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = ("iptables-save", "-c")


class DumpError(RuntimeError):
    pass


def capture_dump(command: Sequence[str] = DEFAULT_COMMAND) -> str:
    """Run the dump command (counters included) and return its stdout."""
    logger.debug("running %s", " ".join(command))
    try:
        result = subprocess.run(list(command), capture_output=True, check=False)
    except OSError as exc:
        raise DumpError(f"cannot run {command[0]}: {exc}") from exc
    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        raise DumpError(f"{command[0]} exited with status {result.returncode}: {stderr}")
    return _decode(result.stdout, command[0])


def load_dump(source: str | Path) -> str:
    """Read dump text from a file, or from stdin when ``source`` is ``-``."""
    if str(source) == "-":
        return _decode(sys.stdin.buffer.read(), "stdin")
    try:
        data = Path(source).read_bytes()
    except OSError as exc:
        raise DumpError(f"cannot read {source}: {exc}") from exc
    return _decode(data, str(source))


def _decode(data: bytes, origin: str) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DumpError(f"{origin} is not valid UTF-8: {exc}") from exc
