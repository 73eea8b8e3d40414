"""
Unit tests for the build orchestrator.

External commands are patched out; the tests check step ordering, the
environment handed to autobuild and short-circuiting on the first failure.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from alchemybuild.config.validators import validate_app_config
from alchemybuild.models.config import BuildSettings, EnvironmentOverrides
from alchemybuild.models.memory import MemorySnapshot
from alchemybuild.models.runtime import ToolchainPlan
from alchemybuild.orchestration import BuildRunner, build_log_path
from alchemybuild.system.packages import PackageManager
from alchemybuild.validation import BuildStepError

MODULE = "alchemybuild.orchestration.build_runner"
GIB = 1024 * 1024

ALL_STEPS = [
    "install-dependencies",
    "prepare-cache",
    "setup-venv",
    "select-toolchain",
    "plan-jobs",
    "local-commands",
    "configure",
    "build",
]


def make_settings(root: Path, config_data=None, **kwargs) -> BuildSettings:
    data = config_data or {
        "build": {"installable_cache": "cache", "log_dir": "logs"},
        "environment": {"venv_dir": ".venv", "pip_packages": ["autobuild"]},
    }
    overrides = kwargs.pop("overrides", EnvironmentOverrides(target_arch="x86_64"))
    kwargs.setdefault("source_dir", root)
    return BuildSettings(
        config=validate_app_config(data, root_dir=root),
        overrides=overrides,
        **kwargs,
    )


@pytest.fixture
def patched_system():
    """Patch every host-facing call made by the runner."""
    with (
        patch(f"{MODULE}.read_os_release", return_value={"ID": "debian"}) as os_release,
        patch(f"{MODULE}.read_package_list", return_value=["cmake"]) as package_list,
        patch(f"{MODULE}.install_packages") as install,
        patch(f"{MODULE}.create_virtualenv") as venv,
        patch(f"{MODULE}.select_toolchain",
              return_value=ToolchainPlan(compiler_launcher="ccache",
                                         cmake_options=["-DCMAKE_C_COMPILER_LAUNCHER=ccache"])) as toolchain,
        patch(f"{MODULE}.get_logical_cpu_count", return_value=8) as cpu_count,
        patch("alchemybuild.system.jobs.read_memory_snapshot",
              return_value=MemorySnapshot(4 * GIB, GIB, 3 * GIB, 8 * GIB)) as snapshot,
        patch(f"{MODULE}.build_priority_prefix", side_effect=lambda *a, **k: ["nice", "-n18"]) as prefix,
        patch(f"{MODULE}.command_available", return_value=False) as available,
        patch(f"{MODULE}.run_logged", return_value=0) as run_logged,
    ):
        yield {
            "os_release": os_release,
            "package_list": package_list,
            "install": install,
            "venv": venv,
            "toolchain": toolchain,
            "cpu_count": cpu_count,
            "snapshot": snapshot,
            "prefix": prefix,
            "available": available,
            "run_logged": run_logged,
        }


@pytest.mark.unit
class TestBuildRunner:

    def test_full_run(self, temp_dir, patched_system):
        summary = BuildRunner(make_settings(temp_dir), environ={"PATH": "/usr/bin"}).run()

        assert summary.success
        assert [s.name for s in summary.steps] == ALL_STEPS
        patched_system["install"].assert_called_once()
        assert patched_system["install"].call_args.args[0] is PackageManager.APT
        assert (temp_dir / "cache").is_dir()

        configure, build = [c.args[0] for c in patched_system["run_logged"].call_args_list]
        assert configure == [
            "nice", "-n18", "autobuild", "configure", "-A", "64", "-c", "ReleaseOS", "--",
            "-DDISABLE_FATAL_WARNINGS=ON",
            "-DCMAKE_C_COMPILER_LAUNCHER=ccache",
            "-DCMAKE_EXPORT_COMPILE_COMMANDS=ON",
        ]
        assert build == [
            "nice", "-n18", "autobuild", "build", "-A", "64", "-c", "ReleaseOS", "--no-configure",
        ]

    def test_environment_handed_to_autobuild(self, temp_dir, patched_system):
        BuildRunner(make_settings(temp_dir), environ={"PATH": "/usr/bin"}).run()

        env = patched_system["run_logged"].call_args.kwargs["env"]
        # 4GiB RAM, 8 CPUs, 1GiB per job, swap holds used memory -> 4 jobs
        assert env["AUTOBUILD_CPU_COUNT"] == "4"
        assert env["AUTOBUILD_INSTALLABLE_CACHE"] == str(temp_dir / "cache")
        assert env["VIRTUAL_ENV"] == str(temp_dir / ".venv")
        assert env["PATH"].startswith(str(temp_dir / ".venv" / "bin"))
        assert patched_system["run_logged"].call_args.kwargs["cwd"] == temp_dir

    def test_viewer_checkout_is_separate_from_config_root(self, temp_dir, patched_system):
        root = temp_dir / "helper"
        viewer = temp_dir / "viewer"
        (root / "needed_packages").mkdir(parents=True)
        viewer.mkdir()
        (root / "local-commands.sh").write_text("export FOO=bar\n")

        with patch(f"{MODULE}.source_shell_script", side_effect=lambda script, env: dict(env)) as source:
            summary = BuildRunner(make_settings(root, source_dir=viewer), environ={}).run()

        assert summary.success
        assert summary.log_file.parent == viewer / "logs"
        assert patched_system["package_list"].call_args.args[0] == root / "needed_packages"
        assert source.call_args.args[0] == root / "local-commands.sh"
        assert patched_system["venv"].call_args.args[0] == viewer / ".venv"
        for call in patched_system["run_logged"].call_args_list:
            assert call.kwargs["cwd"] == viewer
            assert call.kwargs["env"]["VIRTUAL_ENV"] == str(viewer / ".venv")

    def test_log_file_has_prologue(self, temp_dir, patched_system):
        summary = BuildRunner(make_settings(temp_dir), environ={}).run()

        assert summary.log_file.parent == temp_dir / "logs"
        assert summary.log_file.name.startswith("build.x86_64.")
        text = summary.log_file.read_text()
        assert "-A 64 -c ReleaseOS" in text
        assert "# jobs: 4 (requested 8, source memory_advisor)" in text

    def test_no_deps_and_no_build(self, temp_dir, patched_system):
        settings = make_settings(temp_dir, skip_dependencies=True, skip_build=True)
        summary = BuildRunner(settings, environ={}).run()

        assert summary.success
        assert summary.steps[0].skipped
        assert summary.steps[-1].skipped
        patched_system["install"].assert_not_called()
        assert patched_system["run_logged"].call_count == 1

    def test_cpu_count_override(self, temp_dir, patched_system):
        settings = make_settings(
            temp_dir, overrides=EnvironmentOverrides(target_arch="x86_64", cpu_count_override=2)
        )
        BuildRunner(settings, environ={}).run()

        patched_system["snapshot"].assert_not_called()
        assert patched_system["run_logged"].call_args.kwargs["env"]["AUTOBUILD_CPU_COUNT"] == "2"

    def test_requested_jobs_replaces_cpu_count(self, temp_dir, patched_system):
        settings = make_settings(temp_dir, requested_jobs=3)
        BuildRunner(settings, environ={}).run()

        patched_system["cpu_count"].assert_not_called()
        assert patched_system["run_logged"].call_args.kwargs["env"]["AUTOBUILD_CPU_COUNT"] == "3"

    def test_secrets_wrapper_when_available(self, temp_dir, patched_system):
        patched_system["available"].return_value = True
        BuildRunner(make_settings(temp_dir), environ={}).run()

        configure = patched_system["run_logged"].call_args_list[0].args[0]
        assert configure[:6] == ["nice", "-n18", "op", "run", "--", "autobuild"]

    def test_stops_at_first_failure(self, temp_dir, patched_system):
        patched_system["venv"].side_effect = BuildStepError("setup-venv", "pip failed", returncode=1)
        summary = BuildRunner(make_settings(temp_dir), environ={}).run()

        assert not summary.success
        assert summary.failed_step.name == "setup-venv"
        assert summary.failed_step.returncode == 1
        assert [s.name for s in summary.steps] == ALL_STEPS[:3]
        patched_system["run_logged"].assert_not_called()

    def test_unexpected_error_is_reported_as_step_failure(self, temp_dir, patched_system):
        patched_system["os_release"].side_effect = PermissionError("denied")
        summary = BuildRunner(make_settings(temp_dir), environ={}).run()

        assert summary.failed_step.name == "install-dependencies"
        assert "PermissionError" in summary.failed_step.message
        assert len(summary.steps) == 1

    def test_configure_failure_skips_build(self, temp_dir, patched_system):
        patched_system["run_logged"].return_value = 2
        summary = BuildRunner(make_settings(temp_dir), environ={}).run()

        assert summary.failed_step.name == "configure"
        assert summary.failed_step.returncode == 2
        assert patched_system["run_logged"].call_count == 1

    def test_local_commands_are_sourced(self, temp_dir, patched_system):
        (temp_dir / "local-commands.sh").write_text("export FOO=bar\n")
        with patch(f"{MODULE}.source_shell_script",
                   side_effect=lambda script, env: {**env, "FOO": "bar"}) as source:
            summary = BuildRunner(make_settings(temp_dir), environ={}).run()

        assert summary.success
        source.assert_called_once()
        assert source.call_args.args[0] == temp_dir / "local-commands.sh"
        assert patched_system["run_logged"].call_args.kwargs["env"]["FOO"] == "bar"

    def test_missing_local_commands_is_skipped(self, temp_dir, patched_system):
        summary = BuildRunner(make_settings(temp_dir), environ={}).run()
        local = next(s for s in summary.steps if s.name == "local-commands")
        assert local.success and local.skipped


@pytest.mark.unit
def test_build_log_path():
    assert build_log_path(Path("/logs"), "aarch64", 1700000000.9) == Path(
        "/logs/build.aarch64.1700000000.log"
    )
