"""
Distribution detection and OS package installation.

The host distribution is identified from /etc/os-release and mapped onto a
closed set of supported package managers. Each package manager knows the
commands that install a list of packages; package lists are plain text
files, one package per line, under `needed_packages/<distribution>.txt`.
"""

import logging
import shlex
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from ..validation import (
    BuildStepError,
    PackageListNotFoundError,
    UnsupportedDistributionError,
)
from .commands import run_interactive

logger = logging.getLogger(__name__)

OS_RELEASE_PATH = Path("/etc/os-release")


class PackageManager(Enum):
    """Supported package managers."""
    APT = "apt"
    PACMAN = "pacman"
    DNF = "dnf"
    EMERGE = "emerge"

    def install_commands(self, packages: List[str]) -> List[List[str]]:
        """Commands that install packages, in the order they must run."""
        if self is PackageManager.APT:
            return [
                ["sudo", "apt", "update"],
                ["sudo", "apt", "install", *packages],
            ]
        if self is PackageManager.PACMAN:
            return [["sudo", "pacman", "-Syu", "--needed", *packages]]
        if self is PackageManager.DNF:
            return [["sudo", "dnf", "install", "--refresh", *packages]]
        return [["sudo", "emerge", "--changed-use", "--newuse", "--ask=y", *packages]]

    @property
    def post_install_note(self) -> Optional[str]:
        if self is PackageManager.EMERGE:
            return (
                "If you have issues emerging VLC, try:\n"
                "euse -D vaapi -p media-video/vlc"
            )
        return None


@dataclass(frozen=True)
class Distribution:
    """A detected distribution family."""

    # Name of the package list, e.g. "debian" for needed_packages/debian.txt.
    package_list: str
    manager: PackageManager


# Checked in order against ID_LIKE (or ID); "arch" must match exactly.
_DISTRIBUTION_RULES = (
    ("arch", True, Distribution("arch", PackageManager.PACMAN)),
    ("ubuntu", False, Distribution("debian", PackageManager.APT)),
    ("debian", False, Distribution("debian", PackageManager.APT)),
    ("fedora", False, Distribution("fedora", PackageManager.DNF)),
    ("gentoo", False, Distribution("gentoo", PackageManager.EMERGE)),
)


def parse_os_release(text: str) -> Dict[str, str]:
    """
    Parse os-release(5) content into a dictionary.

    Examples:
        >>> parse_os_release('ID=ubuntu\\nID_LIKE="debian"\\n')
        {'ID': 'ubuntu', 'ID_LIKE': 'debian'}
    """
    values: Dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        try:
            parts = shlex.split(value)
        except ValueError:
            logger.warning(f"Ignoring malformed os-release line: {raw_line!r}")
            continue
        values[key.strip()] = " ".join(parts)
    return values


def read_os_release(path: Path = OS_RELEASE_PATH) -> Dict[str, str]:
    """
    Read and parse an os-release file.

    Raises:
        UnsupportedDistributionError: If the file does not exist
    """
    if not path.exists():
        raise UnsupportedDistributionError("Unable to determine the Linux distribution")
    return parse_os_release(path.read_text(encoding="utf-8"))


def detect_distribution(os_release: Mapping[str, str]) -> Distribution:
    """
    Map os-release values onto a supported distribution family.

    ID_LIKE is consulted first; distributions that do not set it (Zorin,
    AerynOS, ...) are matched on ID instead.

    Raises:
        UnsupportedDistributionError: If nothing matches
    """
    candidates = [os_release.get("ID_LIKE", ""), os_release.get("ID", "")]
    for candidate in candidates:
        if not candidate:
            continue
        for name, exact, distribution in _DISTRIBUTION_RULES:
            if (exact and candidate == name) or (not exact and name in candidate):
                logger.info(
                    f"Detected {distribution.package_list} family "
                    f"(package manager: {distribution.manager.value})"
                )
                return distribution
        # ID is only a fallback for a missing ID_LIKE
        break
    raise UnsupportedDistributionError(
        f"Unsupported distribution (ID={os_release.get('ID', '')!r}, "
        f"ID_LIKE={os_release.get('ID_LIKE', '')!r})"
    )


def read_package_list(list_dir: Path, name: str) -> List[str]:
    """
    Read the package names for a distribution family.

    Blank lines and `#` comments are ignored.

    Raises:
        PackageListNotFoundError: If no list exists for name
    """
    file_path = list_dir / f"{name}.txt"
    if not file_path.is_file():
        raise PackageListNotFoundError(
            f"Package file not found for {name}. Please submit a pull request "
            f"once you got a package list that works for {name}"
        )
    packages = []
    for line in file_path.read_text(encoding="utf-8").splitlines():
        entry = line.split("#", 1)[0].strip()
        if entry:
            packages.append(entry)
    logger.debug(f"Read {len(packages)} packages from {file_path}")
    return packages


def install_packages(
    manager: PackageManager,
    packages: List[str],
    env: Optional[Mapping[str, str]] = None,
) -> None:
    """
    Install packages with the given package manager.

    Raises:
        BuildStepError: On the first command that exits non-zero
    """
    for command in manager.install_commands(packages):
        returncode = run_interactive(command, env=env)
        if returncode != 0:
            raise BuildStepError(
                "install-dependencies",
                f"'{shlex.join(command[:3])} ...' exited with status {returncode}",
                returncode=returncode,
            )
    note = manager.post_install_note
    if note:
        logger.info(f"NOTE: {note}")
    logger.info("Packages installed successfully")
