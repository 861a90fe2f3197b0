import sys

import pytest

from errors import ExternalCommandError
from helpers import IGNORE_SIGTERM, SLEEP_FOREVER, wait_until
from redeploy import Redeployer


class RecordingRunner:
    """Notes which managed processes were still alive when each command ran."""

    def __init__(self, supervisor, fail=None):
        self.supervisor = supervisor
        self.fail = fail
        self.calls = []

    def __call__(self, command):
        alive = [name for name in self.supervisor.names() if self.supervisor.is_running(name)]
        self.calls.append((command, alive))
        if command == self.fail:
            raise ExternalCommandError([command], 1, f"{command} broke\n")
        return f"{command} ok\n"


def test_build_runs_after_processes_exit(supervisor):
    runner = RecordingRunner(supervisor)
    supervisor.start("signaling", SLEEP_FOREVER)
    supervisor.start("client", SLEEP_FOREVER)

    output = Redeployer(supervisor, "fetch", "build", stop_timeout=10, runner=runner).redeploy()

    assert output == "build ok\n"
    assert runner.calls[0] == ("fetch", ["signaling", "client"])
    assert runner.calls[1] == ("build", [])


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
def test_child_ignoring_termination_is_killed_before_build(supervisor):
    runner = RecordingRunner(supervisor)
    supervisor.start("client", IGNORE_SIGTERM)
    assert wait_until(lambda: "ready" in supervisor.tail_logs("client"))

    Redeployer(supervisor, "fetch", "build", stop_timeout=1, runner=runner).redeploy()

    assert runner.calls[1] == ("build", [])
    assert not supervisor.is_running("client")


def test_fetch_failure_leaves_processes_running(supervisor):
    runner = RecordingRunner(supervisor, fail="fetch")
    supervisor.start("client", SLEEP_FOREVER)

    with pytest.raises(ExternalCommandError) as excinfo:
        Redeployer(supervisor, "fetch", "build", runner=runner).redeploy()

    assert excinfo.value.output == "fetch broke\n"
    assert [command for command, _ in runner.calls] == ["fetch"]
    assert supervisor.is_running("client")


def test_nothing_running_still_builds(supervisor):
    runner = RecordingRunner(supervisor)

    Redeployer(supervisor, "fetch", "build", runner=runner).redeploy()

    assert [command for command, _ in runner.calls] == ["fetch", "build"]
