import pytest

from errors import NotRunningError
from supervisor import ProcessSupervisor


@pytest.fixture
def supervisor(tmp_path):
    supervisor = ProcessSupervisor({
        "signaling": str(tmp_path / "signaling.log"),
        "client": str(tmp_path / "client.log"),
    })
    yield supervisor
    for name in supervisor.names():
        try:
            supervisor.stop(name)
        except NotRunningError:
            continue
        supervisor.wait_stopped(name, 10)
