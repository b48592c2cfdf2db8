"""
Cleanup orchestrator.

Runs the static action list in order, each command through the runner,
between two free-space measurements, then writes the report.
"""

import logging
from typing import Callable, Optional, Sequence

from reclaim.actions import ACTIONS, ActionContext, CleanupAction
from reclaim.config import RunConfig
from reclaim.errors import ActionSkipped, CommandFailedError, UnsupportedDistroError
from reclaim.logsink import LogSink
from reclaim.runner import CommandRunner
from reclaim.space import SpaceMeasurement, generate_report, measure_free_space

logger = logging.getLogger(__name__)


class Orchestrator:
    """Sequential cleanup run with a before/after report."""

    def __init__(
        self,
        config: RunConfig,
        sink: LogSink,
        runner: Optional[CommandRunner] = None,
        actions: Sequence[CleanupAction] = ACTIONS,
        measure: Callable[[], SpaceMeasurement] = measure_free_space,
    ):
        self.config = config
        self.sink = sink
        self.runner = runner or CommandRunner(config, sink)
        self.actions = actions
        self.measure = measure
        self.start: Optional[SpaceMeasurement] = None
        self.end: Optional[SpaceMeasurement] = None

    def run(self) -> int:
        """Execute every action and report.

        Returns 0. Fatal errors propagate as FatalError.
        """
        self.sink.info("========== Starting System Cleanup ==========")

        self.start = self.measure()
        self.sink.info("Initial free space: %d MB", self.start.free_mb)

        context = ActionContext(config=self.config, sink=self.sink, runner=self.runner)
        for action in self.actions:
            self._run_action(action, context)

        self.end = self.measure()
        generate_report(self.start, self.end, self.sink, self.runner)
        self.sink.info("========== Cleanup Finished ==========")
        return 0

    def _run_action(self, action: CleanupAction, context: ActionContext) -> None:
        self.sink.info(action.announce)
        try:
            commands = action.plan(context)
        except ActionSkipped as e:
            if e.warning:
                self.sink.warning("%s", e)
            else:
                self.sink.info("%s", e)
            return
        except UnsupportedDistroError as e:
            if action.critical:
                raise CommandFailedError(str(e)) from e
            self.sink.warning("%s, skipping", e)
            return

        logger.debug("%s planned %d command(s)", action.name, len(commands))
        for command in commands:
            self.runner.run(command, critical=action.critical)
