"""Invocation of the ``buf`` CLI."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_BUF_EXECUTABLE = "buf"


class BufGenerateError(RuntimeError):
    """Raised when ``buf generate`` cannot be run or fails."""


def run_buf_generate(
    *,
    template_path: Path,
    working_dir: Path,
    buf_executable: str = DEFAULT_BUF_EXECUTABLE,
) -> str:
    """Run ``buf generate`` with an explicit generation template.

    Args:
        template_path (Path): ``buf.gen.yaml`` style template to generate from.
        working_dir (Path): Directory buf runs in; relative paths resolve against it.
        buf_executable (str): Name or path of the buf binary.

    Returns:
        str: Captured standard output of the buf run.
    """
    command = [buf_executable, "generate", "--template", str(template_path)]
    logger.info("Running %s in %s", " ".join(command), working_dir)
    try:
        completed = subprocess.run(
            command,
            check=True,
            capture_output=True,
            text=True,
            cwd=working_dir,
        )
    except OSError as exc:
        raise BufGenerateError(f"Failed to execute {buf_executable} generate: {exc}") from exc
    except subprocess.CalledProcessError as exc:
        error_text = (exc.stderr or "").strip() or (exc.stdout or "").strip() or str(exc)
        raise BufGenerateError(f"buf generate failed for {template_path}: {error_text}") from exc

    if completed.stderr and "deprecated" not in completed.stderr:
        logger.warning("buf generate reported: %s", completed.stderr.strip())
    return completed.stdout
