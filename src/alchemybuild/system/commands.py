"""
Command execution utilities.

This module provides functions for executing external commands either
interactively (package managers may prompt), with captured output, or with
output teed to a build log file.
"""

import logging
import shlex
import shutil
import subprocess
import sys
from pathlib import Path
from typing import IO, Dict, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


def command_available(name: str) -> bool:
    """Check whether an executable is found on PATH."""
    return shutil.which(name) is not None


def which(name: str) -> Optional[str]:
    """Full path of an executable on PATH, or None."""
    return shutil.which(name)


def run_command(
    command: Sequence[str],
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Tuple[int, str, str]:
    """Execute a command and capture its output with robust error handling.

    Args:
        command: Argument vector to execute.
        cwd: Working directory for command execution.
        env: Environment for the child process, inherited when None.

    Returns:
        Tuple of (return_code, stdout_string, stderr_string).
        return_code is -1 for execution errors.
    """
    logger.debug(f"Executing command: '{shlex.join(command)}' in '{cwd or '.'}'")
    try:
        process = subprocess.run(
            list(command),
            cwd=cwd,
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
        return process.returncode, process.stdout, process.stderr
    except FileNotFoundError as e:
        logger.error(f"Command not found: {command[0]}: {type(e).__name__}: {e}")
        return -1, "", f"Error: Command not found '{command[0]}'"
    except OSError as e:
        logger.error(f"Failed to run '{shlex.join(command)}': {type(e).__name__}: {e}")
        return -1, "", f"An unexpected error occurred: {e}"


def run_interactive(
    command: Sequence[str],
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> int:
    """Run a command attached to the current terminal.

    Used for package managers, which may ask for a password or confirmation.

    Returns:
        The command's exit status, or -1 if it could not be started.
    """
    logger.info(f"Running: {shlex.join(command)}")
    try:
        return subprocess.run(
            list(command),
            cwd=cwd,
            env=dict(env) if env is not None else None,
            check=False,
        ).returncode
    except OSError as e:
        logger.error(f"Failed to run '{shlex.join(command)}': {type(e).__name__}: {e}")
        return -1


def run_logged(
    command: Sequence[str],
    log_file: Path,
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    console: Optional[IO[str]] = None,
) -> int:
    """Run a command, copying its output to the console and a log file.

    stdout and stderr are merged and appended line by line to log_file.

    Args:
        command: Argument vector to execute.
        log_file: File the output is appended to.
        cwd: Working directory.
        env: Environment for the child process.
        console: Stream output is echoed to, defaults to sys.stdout.

    Returns:
        The command's exit status, or -1 if it could not be started.
    """
    console = console or sys.stdout
    logger.info(f"Running: {shlex.join(command)}")
    try:
        with open(log_file, "a", encoding="utf-8") as log:
            log.write(f"$ {shlex.join(command)}\n")
            log.flush()
            process = subprocess.Popen(
                list(command),
                cwd=cwd,
                env=dict(env) if env is not None else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
            try:
                for line in process.stdout:
                    console.write(line)
                    log.write(line)
            except BaseException:
                # Interrupted (Ctrl-C, console write failure): do not leave autobuild running.
                process.kill()
                process.wait()
                raise
            finally:
                process.stdout.close()
            return process.wait()
    except OSError as e:
        logger.error(f"Failed to run '{shlex.join(command)}': {type(e).__name__}: {e}")
        return -1


def build_priority_prefix(niceness: int, ionice_class: int) -> List[str]:
    """Prefix that runs a command at low CPU and I/O priority.

    Each wrapper is only added when its tool is installed.

    Examples:
        >>> build_priority_prefix(18, 3)  # doctest: +SKIP
        ['nice', '-n18', 'ionice', '-c3']
    """
    prefix: List[str] = []
    if command_available("nice"):
        prefix += ["nice", f"-n{niceness}"]
    if command_available("ionice"):
        prefix += ["ionice", f"-c{ionice_class}"]
    return prefix


def source_shell_script(
    script: Path,
    env: Mapping[str, str],
    shell: str = "/bin/bash",
) -> Dict[str, str]:
    """Source a shell script and return the environment it leaves behind.

    Args:
        script: Script to source.
        env: Environment the script starts from.
        shell: Shell used to source it.

    Returns:
        The resulting environment.

    Raises:
        RuntimeError: If the script fails.
    """
    command = [shell, "-c", f"set -e; source {shlex.quote(str(script))} >&2; env -0"]
    returncode, stdout, stderr = run_command(command, env=env)
    if returncode != 0:
        raise RuntimeError(
            f"sourcing {script} exited with status {returncode}: {stderr.strip()}"
        )
    result: Dict[str, str] = {}
    for entry in stdout.split("\0"):
        key, sep, value = entry.partition("=")
        if sep and key:
            result[key] = value
    return result
