import sys
import time


class FakeWebSocket:
    """Stands in for a peer transport: records sends, optionally fails them."""

    def __init__(self, fail_send: bool = False):
        self.fail_send = fail_send
        self.sent = []
        self.closed = False

    async def send_text(self, payload: str) -> None:
        if self.fail_send:
            raise ConnectionResetError("peer went away")
        self.sent.append(payload)

    async def close(self) -> None:
        self.closed = True


def python_command(code: str) -> list:
    return [sys.executable, "-c", code]


SLEEP_FOREVER = python_command("import time; time.sleep(60)")
EXIT_NOW = python_command("pass")


def wait_until(predicate, timeout: float = 10.0, interval: float = 0.05) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if _holds(predicate):
            return True
        time.sleep(interval)
    return _holds(predicate)


def _holds(predicate) -> bool:
    # the predicate may read state the event-loop thread is mutating
    try:
        return bool(predicate())
    except RuntimeError:
        return False


# Ignores SIGTERM, announces readiness once the handler is installed
IGNORE_SIGTERM = python_command(
    "import signal, time\n"
    "signal.signal(signal.SIGTERM, signal.SIG_IGN)\n"
    "print('ready', flush=True)\n"
    "time.sleep(60)"
)
