"""
Pytest configuration and shared fixtures for the alchemybuild test suite.
"""

import shutil
import sys
import tempfile
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

GIB_KB = 1024 * 1024


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def sample_config_data():
    """Sample config.toml content for testing."""
    return {
        "build": {
            "architecture": "64",
            "configuration": "ReleaseOS",
            "cmake_options": ["-DDISABLE_FATAL_WARNINGS=ON"],
            "export_compile_commands": True,
            "installable_cache": "cache/autobuild",
            "log_dir": "logs",
        },
        "jobs": {
            "memory_per_job_kb": GIB_KB,
            "smart_job_count": True,
        },
        "environment": {
            "python": "/usr/bin/python3",
            "venv_dir": ".venv",
            "pip_packages": ["autobuild", "cmake"],
        },
        "packages": {
            "list_dir": "needed_packages",
        },
        "scheduling": {
            "niceness": 18,
            "ionice_class": 3,
            "secrets_wrapper": ["op", "run", "--"],
            "local_commands": "local-commands.sh",
        },
    }


@pytest.fixture
def config_files(temp_dir, sample_config_data):
    """Create a repository layout with conf/config.toml and package lists."""
    import toml

    conf_dir = temp_dir / "conf"
    conf_dir.mkdir()
    config_file = conf_dir / "config.toml"
    with open(config_file, "w") as f:
        toml.dump(sample_config_data, f)

    packages_dir = temp_dir / "needed_packages"
    packages_dir.mkdir()
    (packages_dir / "debian.txt").write_text("build-essential\n# comment\n\ncmake\n")

    return {
        "config": config_file,
        "packages": packages_dir,
        "root": temp_dir,
    }


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_psutil():
    """Mock psutil memory and CPU queries: 8 CPUs, 16GiB RAM, 2GiB swap."""
    with (
        patch("psutil.cpu_count") as mock_cpu_count,
        patch("psutil.virtual_memory") as mock_virtual_memory,
        patch("psutil.swap_memory") as mock_swap_memory,
    ):
        mock_cpu_count.return_value = 8
        mock_virtual_memory.return_value = Mock(
            total=16 * 1024**3,
            used=4 * 1024**3,
            available=12 * 1024**3,
        )
        mock_swap_memory.return_value = Mock(total=2 * 1024**3, free=2 * 1024**3)

        yield {
            "cpu_count": mock_cpu_count,
            "virtual_memory": mock_virtual_memory,
            "swap_memory": mock_swap_memory,
        }


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    from alchemybuild.config import manager

    original_config_path = manager._DEFAULT_CONFIG_FILE_PATH

    yield

    manager.clear_config_cache()
    manager.set_config_path(original_config_path)
