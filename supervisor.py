import subprocess
import sys
import threading
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Callable, Dict, Iterable, List, Optional, Sequence

from constants import LOG_TAIL_LINES
from errors import AlreadyRunningError, LogsNotFoundError, NotRunningError, SupervisorError, UnknownProcessError
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProcessExit:
    name: str
    pid: int
    returncode: int


ExitListener = Callable[[ProcessExit], None]


class ManagedProcess:
    """A named slot holding at most one live OS process."""

    def __init__(self, name: str, log_path: Optional[str] = None):
        self.name = name
        self.log_path = log_path
        self.lock = threading.Lock()
        self.process: Optional[subprocess.Popen] = None
        self.last_exit_code: Optional[int] = None
        self.terminate_sent = False
        self.exited = threading.Event()
        self.exited.set()


class ProcessSupervisor:
    """Starts, stops and watches named external processes.

    Each child's stdout and stderr are copied line by line to the
    controller's own console and appended to the process log file. A watcher
    thread per child waits for it to exit and clears the slot, but only if the
    slot still holds that same child.

    All operations on one process are serialized by its lock. ``stop`` only
    signals the child (SIGTERM first, SIGKILL if it is stopped again while
    still alive); use ``wait_stopped`` to block until the watcher has
    observed the exit.
    """

    def __init__(self, processes: Optional[Dict[str, Optional[str]]] = None):
        self._processes: Dict[str, ManagedProcess] = {}
        self._listeners: List[ExitListener] = []
        for name, log_path in (processes or {}).items():
            self.register(name, log_path)

    def register(self, name: str, log_path: Optional[str] = None) -> ManagedProcess:
        entry = ManagedProcess(name, log_path)
        self._processes[name] = entry
        return entry

    def add_listener(self, listener: ExitListener) -> None:
        self._listeners.append(listener)

    def names(self) -> List[str]:
        return list(self._processes)

    def start(self, name: str, command: Sequence[str], args: Iterable[str] = (), log_path: Optional[str] = None) -> int:
        entry = self._get(name)
        cmd = list(command) + list(args)
        with entry.lock:
            if entry.process is not None:
                raise AlreadyRunningError(name)

            if log_path is not None:
                entry.log_path = log_path
            log_file = self._open_log(entry)

            try:
                process = subprocess.Popen(
                    cmd,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    text=True,
                    errors="replace",
                    bufsize=1,
                )
            except OSError as e:
                if log_file:
                    log_file.close()
                logger.error(f"Failed to start {name} ({' '.join(cmd)}): {e}")
                raise SupervisorError(f"Failed to start {name}: {e}") from e

            entry.process = process
            entry.terminate_sent = False
            exited = threading.Event()
            entry.exited = exited

        log_lock = threading.Lock()
        pumps = [
            threading.Thread(target=_pump, args=(process.stdout, sys.stdout, log_file, log_lock), daemon=True),
            threading.Thread(target=_pump, args=(process.stderr, sys.stderr, log_file, log_lock), daemon=True),
        ]
        for pump in pumps:
            pump.start()
        threading.Thread(
            target=self._watch,
            args=(entry, process, pumps, log_file, exited),
            name=f"watch-{name}-{process.pid}",
            daemon=True,
        ).start()

        logger.info(f"Started {name} (pid {process.pid}): {' '.join(cmd)}")
        return process.pid

    def stop(self, name: str) -> None:
        entry = self._get(name)
        with entry.lock:
            if entry.process is None:
                raise NotRunningError(name)
            if entry.terminate_sent:
                entry.process.kill()
                logger.warning(f"{name} (pid {entry.process.pid}) still running after termination signal, killed")
                return
            entry.process.terminate()
            entry.terminate_sent = True
            logger.info(f"Sent termination signal to {name} (pid {entry.process.pid})")

    def kill(self, name: str) -> None:
        entry = self._get(name)
        with entry.lock:
            if entry.process is None:
                raise NotRunningError(name)
            entry.process.kill()
            logger.warning(f"Killed {name} (pid {entry.process.pid})")

    def is_running(self, name: str) -> bool:
        """Best-effort status at the instant of the call."""
        entry = self._get(name)
        with entry.lock:
            return entry.process is not None

    def last_exit_code(self, name: str) -> Optional[int]:
        entry = self._get(name)
        with entry.lock:
            return entry.last_exit_code

    def wait_stopped(self, name: str, timeout: Optional[float] = None) -> bool:
        """Block until the current child of ``name`` has exited and been reaped."""
        entry = self._get(name)
        with entry.lock:
            exited = entry.exited
        return exited.wait(timeout)

    def tail_logs(self, name: str, line_count: int = LOG_TAIL_LINES) -> str:
        entry = self._get(name)
        if not entry.log_path:
            raise LogsNotFoundError(name)
        try:
            with open(entry.log_path, "r", encoding="utf-8", errors="replace") as f:
                return "".join(deque(f, maxlen=line_count))
        except OSError as e:
            logger.debug(f"Cannot read log file {entry.log_path} for {name}: {e}")
            raise LogsNotFoundError(name)

    def _get(self, name: str) -> ManagedProcess:
        entry = self._processes.get(name)
        if entry is None:
            raise UnknownProcessError(name)
        return entry

    def _open_log(self, entry: ManagedProcess) -> Optional[IO[str]]:
        if not entry.log_path:
            return None
        try:
            Path(entry.log_path).parent.mkdir(parents=True, exist_ok=True)
            return open(entry.log_path, "a", encoding="utf-8")
        except OSError as e:
            logger.warning(f"Failed to open log file {entry.log_path} for {entry.name}, logging to console only: {e}")
            return None

    def _watch(self, entry: ManagedProcess, process: subprocess.Popen, pumps: List[threading.Thread],
               log_file: Optional[IO[str]], exited: threading.Event) -> None:
        returncode = process.wait()
        for pump in pumps:
            pump.join()
        if log_file:
            log_file.close()

        with entry.lock:
            if entry.process is process:
                entry.process = None
                entry.last_exit_code = returncode
        logger.debug(f"Reaped {entry.name} (pid {process.pid}), exit code {returncode}")
        exited.set()

        event = ProcessExit(name=entry.name, pid=process.pid, returncode=returncode)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Exit listener failed for {entry.name}: {e}", exc_info=True)


def _pump(stream: IO[str], console: IO[str], log_file: Optional[IO[str]], log_lock: threading.Lock) -> None:
    with stream:
        for line in stream:
            try:
                console.write(line)
                console.flush()
            except (OSError, ValueError):
                # console went away; keep feeding the log file
                pass
            if log_file:
                with log_lock:
                    log_file.write(line)
                    log_file.flush()
