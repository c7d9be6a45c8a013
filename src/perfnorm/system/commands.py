"""
Command execution utilities.

This module runs the external profiler tools and checks that they are
installed. Output can either be captured or written straight to a file, in
which case stdout and stderr share the file.
"""

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple, Union

from ..validation import ErrorSeverity, ProfilerError, handle_subprocess_error

logger = logging.getLogger(__name__)


def run_command(
    command: Sequence[str],
    cwd: Optional[Path] = None,
    env: Optional[Dict[str, str]] = None,
    output_path: Optional[Union[str, Path]] = None,
) -> Tuple[int, str, str]:
    """Execute a command and capture its output.

    Args:
        command: Program and arguments.
        cwd: Working directory, None for the current one.
        env: Extra environment variables on top of the current environment.
        output_path: If given, stdout and stderr are written to this file
            instead of being captured.

    Returns:
        Tuple of (return_code, stdout_string, stderr_string).
        return_code is -1 if the program could not be started. Both strings
        are empty when output went to ``output_path``.
    """
    logger.debug(f"Executing command: {' '.join(command)}")

    full_env = None
    if env:
        full_env = dict(os.environ)
        full_env.update(env)

    try:
        if output_path is not None:
            with open(output_path, "w", encoding="utf-8") as output:
                process = subprocess.run(
                    list(command),
                    cwd=cwd,
                    env=full_env,
                    stdout=output,
                    stderr=subprocess.STDOUT,
                    check=False,
                )
            return process.returncode, "", ""

        process = subprocess.run(
            list(command),
            cwd=cwd,
            env=full_env,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
        return process.returncode, process.stdout, process.stderr
    except FileNotFoundError as e:
        handle_subprocess_error(e, command[0], severity=ErrorSeverity.ERROR, reraise=False, logger=logger)
        return -1, "", f"Error: Command not found '{command[0]}'"


def run_checked(
    command: Sequence[str],
    failure_message: str,
    **kwargs,
) -> str:
    """
    Run a command and raise ProfilerError if it fails.

    Returns:
        Captured stdout (empty when output went to a file)
    """
    code, stdout, stderr = run_command(command, **kwargs)
    if code != 0:
        details = (stderr or stdout).strip()
        raise ProfilerError(f"{failure_message} (exit code {code}): {details}")
    return stdout


def is_tool_installed(name: str) -> bool:
    """Check whether an executable is on PATH (or is an existing path)."""
    return shutil.which(name) is not None
