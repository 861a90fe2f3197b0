import threading
from typing import Callable, List

from commands import Command, run_command
from constants import BUILD_COMMAND, FETCH_COMMAND, REDEPLOY_STOP_TIMEOUT
from errors import NotRunningError
from logging_config import get_logger
from supervisor import ProcessSupervisor

logger = get_logger(__name__)


class Redeployer:
    """Fetch the latest source, stop every managed process, rebuild.

    Stopped processes are not restarted; operators start them again through
    the control API once the build is in place. Before building, each stopped
    process is given ``stop_timeout`` seconds to exit so the build does not
    replace a binary that is still running. A process that outlives the
    termination signal is killed and given another ``stop_timeout``.
    """

    def __init__(self, supervisor: ProcessSupervisor, fetch_command: Command = FETCH_COMMAND,
                 build_command: Command = BUILD_COMMAND, stop_timeout: float = REDEPLOY_STOP_TIMEOUT,
                 runner: Callable[[Command], str] = run_command):
        self.supervisor = supervisor
        self.fetch_command = fetch_command
        self.build_command = build_command
        self.stop_timeout = stop_timeout
        self.runner = runner
        self._lock = threading.Lock()

    def redeploy(self) -> str:
        with self._lock:
            fetch_output = self.runner(self.fetch_command)
            logger.info(f"Fetch complete: {fetch_output.strip()}")

            stopped = self._stop_all()
            for name in stopped:
                self._await_exit(name)

            build_output = self.runner(self.build_command)
            logger.info(f"Build complete after stopping {stopped or 'nothing'}")
            return build_output

    def _await_exit(self, name: str) -> None:
        if self.supervisor.wait_stopped(name, self.stop_timeout):
            return
        logger.warning(f"{name} did not exit within {self.stop_timeout}s of the termination signal, killing it")
        try:
            self.supervisor.kill(name)
        except NotRunningError:
            return
        if not self.supervisor.wait_stopped(name, self.stop_timeout):
            logger.error(f"{name} still not reaped {self.stop_timeout}s after kill, building anyway")

    def _stop_all(self) -> List[str]:
        stopped = []
        for name in self.supervisor.names():
            try:
                self.supervisor.stop(name)
            except NotRunningError:
                continue
            stopped.append(name)
        return stopped
