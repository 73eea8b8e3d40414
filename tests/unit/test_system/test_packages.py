"""
Unit tests for distribution detection and package installation.
"""

import pytest
from unittest.mock import patch

from alchemybuild.system.packages import (
    Distribution,
    PackageManager,
    detect_distribution,
    install_packages,
    parse_os_release,
    read_os_release,
    read_package_list,
)
from alchemybuild.validation import (
    BuildStepError,
    PackageListNotFoundError,
    UnsupportedDistributionError,
)

UBUNTU_OS_RELEASE = """\
NAME="Ubuntu"
VERSION_ID="24.04"
ID=ubuntu
ID_LIKE=debian
PRETTY_NAME="Ubuntu 24.04 LTS"
"""


@pytest.mark.unit
class TestOsRelease:

    def test_parse_strips_quotes_and_comments(self):
        values = parse_os_release('# comment\nNAME="Linux Mint"\nID_LIKE="ubuntu debian"\n\n')
        assert values == {"NAME": "Linux Mint", "ID_LIKE": "ubuntu debian"}

    def test_read_file(self, temp_dir):
        path = temp_dir / "os-release"
        path.write_text(UBUNTU_OS_RELEASE)
        values = read_os_release(path)
        assert values["ID"] == "ubuntu"
        assert values["PRETTY_NAME"] == "Ubuntu 24.04 LTS"

    def test_missing_file(self, temp_dir):
        with pytest.raises(UnsupportedDistributionError):
            read_os_release(temp_dir / "missing")


@pytest.mark.unit
class TestDetectDistribution:

    @pytest.mark.parametrize(
        "os_release, expected",
        [
            ({"ID": "manjaro", "ID_LIKE": "arch"}, Distribution("arch", PackageManager.PACMAN)),
            ({"ID": "linuxmint", "ID_LIKE": "ubuntu debian"}, Distribution("debian", PackageManager.APT)),
            ({"ID": "ubuntu", "ID_LIKE": "debian"}, Distribution("debian", PackageManager.APT)),
            ({"ID": "nobara", "ID_LIKE": "rhel centos fedora"}, Distribution("fedora", PackageManager.DNF)),
            ({"ID": "calculate", "ID_LIKE": "gentoo"}, Distribution("gentoo", PackageManager.EMERGE)),
        ],
    )
    def test_id_like(self, os_release, expected):
        assert detect_distribution(os_release) == expected

    @pytest.mark.parametrize(
        "distro_id, manager",
        [
            ("arch", PackageManager.PACMAN),
            ("debian", PackageManager.APT),
            ("fedora", PackageManager.DNF),
            ("gentoo", PackageManager.EMERGE),
        ],
    )
    def test_falls_back_to_id(self, distro_id, manager):
        assert detect_distribution({"ID": distro_id}).manager is manager

    def test_arch_must_match_exactly(self):
        with pytest.raises(UnsupportedDistributionError):
            detect_distribution({"ID": "foo", "ID_LIKE": "archlinux-ish"})

    def test_unmatched_id_like_does_not_fall_back(self):
        with pytest.raises(UnsupportedDistributionError):
            detect_distribution({"ID": "debian", "ID_LIKE": "suse"})

    def test_empty(self):
        with pytest.raises(UnsupportedDistributionError):
            detect_distribution({})


@pytest.mark.unit
class TestPackageLists:

    def test_read_ignores_blanks_and_comments(self, temp_dir):
        (temp_dir / "debian.txt").write_text("cmake\n\n# tools\nninja-build  # build\n")
        assert read_package_list(temp_dir, "debian") == ["cmake", "ninja-build"]

    def test_missing_list(self, temp_dir):
        with pytest.raises(PackageListNotFoundError) as exc_info:
            read_package_list(temp_dir, "gentoo")
        assert "pull request" in str(exc_info.value)


@pytest.mark.unit
class TestPackageManager:

    def test_apt_updates_first(self):
        assert PackageManager.APT.install_commands(["cmake"]) == [
            ["sudo", "apt", "update"],
            ["sudo", "apt", "install", "cmake"],
        ]

    def test_pacman(self):
        assert PackageManager.PACMAN.install_commands(["cmake", "git"]) == [
            ["sudo", "pacman", "-Syu", "--needed", "cmake", "git"]
        ]

    def test_dnf(self):
        assert PackageManager.DNF.install_commands(["cmake"]) == [
            ["sudo", "dnf", "install", "--refresh", "cmake"]
        ]

    def test_emerge_has_note(self):
        assert PackageManager.EMERGE.install_commands(["dev-build/cmake"]) == [
            ["sudo", "emerge", "--changed-use", "--newuse", "--ask=y", "dev-build/cmake"]
        ]
        assert "euse -D vaapi" in PackageManager.EMERGE.post_install_note
        assert PackageManager.APT.post_install_note is None

    @patch("alchemybuild.system.packages.run_interactive", return_value=0)
    def test_install_runs_all_commands(self, mock_run):
        install_packages(PackageManager.APT, ["cmake"])
        assert mock_run.call_count == 2

    @patch("alchemybuild.system.packages.run_interactive", return_value=100)
    def test_install_stops_on_failure(self, mock_run):
        with pytest.raises(BuildStepError) as exc_info:
            install_packages(PackageManager.APT, ["cmake"])
        assert mock_run.call_count == 1
        assert exc_info.value.returncode == 100
        assert exc_info.value.step == "install-dependencies"
