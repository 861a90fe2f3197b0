from typing import Sequence


class SupervisorError(Exception):
    """Lifecycle violation on a managed process, reported to the control caller."""

    status_code = 500


class AlreadyRunningError(SupervisorError):
    def __init__(self, name: str):
        super().__init__(f"{name} is already running")
        self.name = name


class NotRunningError(SupervisorError):
    def __init__(self, name: str):
        super().__init__(f"{name} is not running")
        self.name = name


class UnknownProcessError(SupervisorError):
    status_code = 404

    def __init__(self, name: str):
        super().__init__(f"Unknown process: {name}")
        self.name = name


class LogsNotFoundError(SupervisorError):
    status_code = 404

    def __init__(self, name: str):
        super().__init__(f"No logs available yet for {name}")
        self.name = name


class ExternalCommandError(Exception):
    """An external command (fetch, build) exited non-zero or could not be run."""

    def __init__(self, command: Sequence[str], returncode: int, output: str):
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        super().__init__(f"{' '.join(self.command)} failed with exit code {returncode}")
