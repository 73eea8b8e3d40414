"""
Python virtual environment for the build tooling.
"""

import logging
import os
import shlex
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from ..validation import BuildStepError
from .commands import run_command

logger = logging.getLogger(__name__)


def create_virtualenv(
    venv_dir: Path,
    python: str,
    pip_packages: List[str],
    env: Optional[Mapping[str, str]] = None,
) -> None:
    """
    Create (or refresh) a virtualenv and install the build tooling into it.

    Raises:
        BuildStepError: If virtualenv or pip fails
    """
    commands = [
        ["virtualenv", f"--python={python}", str(venv_dir)],
        [str(venv_dir / "bin" / "pip"), "install", "--upgrade", "--quiet", *pip_packages],
    ]
    for command in commands:
        logger.info(f"Running: {shlex.join(command)}")
        returncode, stdout, stderr = run_command(command, env=env)
        if stdout.strip():
            logger.debug(stdout.strip())
        if returncode != 0:
            raise BuildStepError(
                "setup-venv",
                f"'{command[0]}' exited with status {returncode}: {stderr.strip()}",
                returncode=returncode,
            )


def activated_environment(venv_dir: Path, base: Mapping[str, str]) -> Dict[str, str]:
    """
    Environment equivalent to sourcing `<venv_dir>/bin/activate`.

    Examples:
        >>> env = activated_environment(Path("/w/.venv"), {"PATH": "/usr/bin"})
        >>> env["PATH"]
        '/w/.venv/bin:/usr/bin'
    """
    env = dict(base)
    bin_dir = str(venv_dir / "bin")
    env["VIRTUAL_ENV"] = str(venv_dir)
    env["PATH"] = os.pathsep.join(p for p in (bin_dir, env.get("PATH", "")) if p)
    env.pop("PYTHONHOME", None)
    return env
