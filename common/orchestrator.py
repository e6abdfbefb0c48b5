# common/orchestrator.py
# -*- coding: utf-8 -*-
"""
Ordered, fail-fast step runner.

Steps run strictly in the order they were added. Each step receives the
settings object and a logger, never another step's results. The first
exception stops the run; nothing is retried or rolled back.
"""

import logging
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple


class RunStatus(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class Step:
    """A named unit of work at a fixed position in the run."""
    ordinal: int
    name: str
    func: Callable[..., Any]
    args: Tuple[Any, ...] = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)
    # Predicate over the settings; None means "always run".
    when: Optional[Callable[[Any], bool]] = None
    # Logged at warning level when the step is skipped; None skips quietly.
    skip_notice: Optional[str] = None


@dataclass
class RunResult:
    """Terminal state of a run."""
    status: RunStatus
    completed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed_step: Optional[int] = None
    failed_name: Optional[str] = None
    cause: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.status == RunStatus.SUCCEEDED

    @property
    def exit_code(self) -> int:
        if self.succeeded:
            return 0
        return exit_code_for(self.cause)


def exit_code_for(cause: Optional[BaseException]) -> int:
    """
    Exit code for a failed run: a delegated tool's own return code is
    passed through, anything else maps to 1. A tool killed by signal N
    (negative return code) maps to 128 + N, as a shell reports it.
    """
    if isinstance(cause, subprocess.CalledProcessError) and cause.returncode:
        if cause.returncode < 0:
            return 128 + abs(cause.returncode)
        return cause.returncode
    return 1


class Orchestrator:
    """Runs a sequence of steps against one settings object."""

    def __init__(
        self,
        app_settings: Any,
        orchestrator_logger: Optional[logging.Logger] = None,
    ):
        """
        Initializes the Orchestrator.

        Args:
            app_settings: The settings object handed to every step and predicate.
            orchestrator_logger: An optional logger instance.
        """
        self.app_settings = app_settings
        self.logger = orchestrator_logger or logging.getLogger(__name__)
        self.steps: List[Step] = []
        self.state: RunStatus = RunStatus.NOT_STARTED
        self.current_step: Optional[int] = None

    def add_step(
        self,
        name: str,
        func: Callable[..., Any],
        args: Optional[List[Any]] = None,
        kwargs: Optional[Dict[str, Any]] = None,
        when: Optional[Callable[[Any], bool]] = None,
        skip_notice: Optional[str] = None,
    ) -> Step:
        """
        Append a step to the run.

        Args:
            name: A short name for the step.
            func: Called as ``func(*args, **kwargs, app_settings=..., current_logger=...)``.
            args: Positional arguments for the function.
            kwargs: Keyword arguments for the function.
            when: Optional predicate over the settings deciding whether the step runs.
            skip_notice: Message shown when the step is skipped. Without one the
                skip is only logged at debug level.
        """
        step = Step(
            ordinal=len(self.steps) + 1,
            name=name,
            func=func,
            args=tuple(args or ()),
            kwargs=dict(kwargs or {}),
            when=when,
            skip_notice=skip_notice,
        )
        self.steps.append(step)
        self.logger.debug(f"Step {step.ordinal} '{name}' added to the queue.")
        return step

    def should_run(self, step: Step) -> bool:
        if step.when is None:
            return True
        return bool(step.when(self.app_settings))

    def plan(self) -> List[Tuple[Step, bool]]:
        """Return each step with whether it would run under the current settings."""
        return [(step, self.should_run(step)) for step in self.steps]

    def run(self) -> RunResult:
        """
        Execute all steps in order, stopping at the first failure.

        Returns:
            A RunResult in the SUCCEEDED or FAILED state.
        """
        total = len(self.steps)
        result = RunResult(status=RunStatus.RUNNING)
        self.state = RunStatus.RUNNING
        self.logger.info("Orchestration started.")

        for step in self.steps:
            self.current_step = step.ordinal
            try:
                if not self.should_run(step):
                    if step.skip_notice:
                        self.logger.warning(
                            f"⏭️ Step {step.ordinal}/{total} '{step.name}' skipped: {step.skip_notice}"
                        )
                    else:
                        self.logger.debug(
                            f"Step {step.ordinal}/{total} '{step.name}' skipped."
                        )
                    result.skipped.append(step.name)
                    continue

                self.logger.info(
                    f"--- Step {step.ordinal}/{total}: Running '{step.name}' ---"
                )
                step.func(
                    *step.args,
                    **step.kwargs,
                    app_settings=self.app_settings,
                    current_logger=self.logger,
                )
                result.completed.append(step.name)
                self.logger.info(
                    f"✅ Step '{step.name}' completed successfully."
                )
            except Exception as e:
                self.logger.critical(
                    f"🔥 Step {step.ordinal}/{total} '{step.name}' failed: {e}",
                    exc_info=True,
                )
                self.logger.error(
                    "A fatal error occurred. Halting orchestration."
                )
                result.status = RunStatus.FAILED
                result.failed_step = step.ordinal
                result.failed_name = step.name
                result.cause = e
                self.state = RunStatus.FAILED
                return result

        result.status = RunStatus.SUCCEEDED
        self.state = RunStatus.SUCCEEDED
        self.logger.info("✨ Orchestration finished successfully.")
        return result
