"""
Build orchestration.

The BuildRunner walks through the setup and build steps in a fixed order.
Each step returns a StepResult; the run stops at the first failed step and
the summary names it.
"""

import logging
import os
from typing import Callable, List, Mapping, Optional

from ..models.config import BuildSettings
from ..models.runtime import RunContext, RunSummary, StepResult
from ..system.commands import (
    build_priority_prefix,
    command_available,
    run_logged,
    source_shell_script,
)
from ..system.jobs import plan_jobs
from ..system.memory import get_logical_cpu_count
from ..system.packages import (
    detect_distribution,
    install_packages,
    read_os_release,
    read_package_list,
)
from ..system.toolchain import select_toolchain
from ..system.venv import activated_environment, create_virtualenv
from ..validation import BuildStepError, ErrorSeverity, handle_error
from .log_manager import LogManager

logger = logging.getLogger(__name__)

EXPORT_COMPILE_COMMANDS = "-DCMAKE_EXPORT_COMPILE_COMMANDS=ON"


class BuildRunner:
    """
    Runs the build helper steps for one invocation.
    """

    def __init__(self, settings: BuildSettings, environ: Optional[Mapping[str, str]] = None):
        """
        Args:
            settings: Immutable settings for this invocation
            environ: Base environment for child processes, defaults to os.environ
        """
        self.settings = settings
        self.log_manager = LogManager(settings)
        self.context = RunContext(
            log_file=self.log_manager.log_file,
            env=dict(os.environ if environ is None else environ),
        )

    def steps(self) -> List[Callable[[], StepResult]]:
        """The ordered step functions."""
        return [
            self.install_dependencies,
            self.prepare_cache,
            self.setup_venv,
            self.select_toolchain,
            self.plan_jobs,
            self.local_commands,
            self.configure,
            self.build,
        ]

    def run(self) -> RunSummary:
        """
        Execute every step, stopping at the first failure.

        Returns:
            RunSummary holding the result of each step that ran
        """
        summary = RunSummary(log_file=self.context.log_file)
        try:
            self.log_manager.open_log()
        except OSError as e:
            handle_error(e, "opening build log", reraise=False, logger=logger)
            summary.steps.append(StepResult("open-log", False, str(e)))
            return summary

        for step in self.steps():
            result = self._run_step(step)
            summary.steps.append(result)
            if not result.success:
                logger.error(f"Step '{result.name}' failed: {result.message}")
                break
        return summary

    def _run_step(self, step: Callable[[], StepResult]) -> StepResult:
        name = step.__name__.replace("_", "-")
        logger.info(f"--- {name} ---")
        try:
            return step()
        except BuildStepError as e:
            handle_error(e, f"step '{name}'", reraise=False, logger=logger)
            return StepResult(name, False, str(e), returncode=e.returncode)
        except Exception as e:
            handle_error(
                e, f"step '{name}'", severity=ErrorSeverity.ERROR, reraise=False, logger=logger
            )
            return StepResult(name, False, f"{type(e).__name__}: {e}")

    def _autobuild_command(self, *args: str) -> List[str]:
        scheduling = self.settings.config.scheduling
        build = self.settings.config.build
        command = build_priority_prefix(scheduling.niceness, scheduling.ionice_class)
        wrapper = scheduling.secrets_wrapper
        if wrapper and command_available(wrapper[0]):
            command += list(wrapper)
        command += ["autobuild", *args, "-A", build.architecture, "-c", build.configuration]
        return command

    def _run_autobuild(self, step: str, command: List[str]) -> StepResult:
        returncode = run_logged(
            command,
            self.context.log_file,
            cwd=self.settings.source_dir,
            env=self.context.env,
        )
        if returncode != 0:
            raise BuildStepError(step, f"autobuild exited with status {returncode}", returncode)
        return StepResult(step, True, returncode=returncode)

    # --- Steps ---

    def install_dependencies(self) -> StepResult:
        if self.settings.skip_dependencies:
            return StepResult("install-dependencies", True, "skipped (--no-deps)", skipped=True)
        distribution = detect_distribution(read_os_release())
        list_dir = self.settings.resolve_path(self.settings.config.packages.list_dir)
        packages = read_package_list(list_dir, distribution.package_list)
        install_packages(distribution.manager, packages, env=self.context.env)
        return StepResult(
            "install-dependencies", True, f"{len(packages)} packages via {distribution.manager.value}"
        )

    def prepare_cache(self) -> StepResult:
        cache = self.settings.installable_cache
        cache.mkdir(parents=True, exist_ok=True)
        self.context.env["AUTOBUILD_INSTALLABLE_CACHE"] = str(cache)
        return StepResult("prepare-cache", True, str(cache))

    def setup_venv(self) -> StepResult:
        environment = self.settings.config.environment
        venv_dir = self.settings.resolve_source_path(environment.venv_dir)
        create_virtualenv(venv_dir, environment.python, environment.pip_packages, env=self.context.env)
        self.context.env = activated_environment(venv_dir, self.context.env)
        return StepResult("setup-venv", True, str(venv_dir))

    def select_toolchain(self) -> StepResult:
        plan = select_toolchain(self.settings.overrides)
        self.context.cmake_options = list(self.settings.config.build.cmake_options) + plan.cmake_options
        return StepResult("select-toolchain", True, plan.description)

    def plan_jobs(self) -> StepResult:
        requested = self.settings.requested_jobs or get_logical_cpu_count()
        plan = plan_jobs(
            requested,
            self.settings.config.jobs.memory_per_job_kb,
            override=self.settings.overrides.cpu_count_override,
            smart=self.settings.smart_job_count,
        )
        self.context.resolved_jobs = plan.resolved_jobs
        self.context.env["AUTOBUILD_CPU_COUNT"] = str(plan.resolved_jobs)
        self.log_manager.log_job_plan(plan)
        return StepResult("plan-jobs", True, f"{plan.resolved_jobs} jobs ({plan.source})")

    def local_commands(self) -> StepResult:
        script = self.settings.resolve_path(self.settings.config.scheduling.local_commands)
        if not script.is_file():
            return StepResult("local-commands", True, f"no {script.name}", skipped=True)
        logger.info(f"Sourcing {script}")
        self.context.env = source_shell_script(script, self.context.env)
        return StepResult("local-commands", True, str(script))

    def configure(self) -> StepResult:
        options = list(self.context.cmake_options)
        if self.settings.config.build.export_compile_commands:
            options.append(EXPORT_COMPILE_COMMANDS)
        command = self._autobuild_command("configure") + ["--", *options]
        return self._run_autobuild("configure", command)

    def build(self) -> StepResult:
        if self.settings.skip_build:
            return StepResult("build", True, "skipped (--no-build)", skipped=True)
        logger.info(f"Building with {self.context.env.get('AUTOBUILD_CPU_COUNT')} jobs")
        command = self._autobuild_command("build") + ["--no-configure"]
        return self._run_autobuild("build", command)
