from typing import Callable, Dict, Optional, Sequence

from fastapi import FastAPI

from commands import current_commit, split_command
from constants import CLIENT_COMMAND, CLIENT_LOG_FILE, LOG_TAIL_LINES, SIGNALING_COMMAND, SIGNALING_LOG_FILE
from logging_config import get_logger
from redeploy import Redeployer
from routers.processes import processes_router
from supervisor import ProcessExit, ProcessSupervisor

logger = get_logger(__name__)


def default_supervisor() -> ProcessSupervisor:
    return ProcessSupervisor({
        "signaling": SIGNALING_LOG_FILE,
        "client": CLIENT_LOG_FILE,
    })


def create_controller_app(
    supervisor: Optional[ProcessSupervisor] = None,
    redeployer: Optional[Redeployer] = None,
    launch_commands: Optional[Dict[str, Sequence[str]]] = None,
    commit_reader: Callable[[], str] = current_commit,
    log_tail_lines: int = LOG_TAIL_LINES,
) -> FastAPI:
    """Build the control plane around an explicit supervisor and redeployer."""
    supervisor = supervisor or default_supervisor()

    app = FastAPI(title="Process Controller")
    app.state.supervisor = supervisor
    app.state.redeployer = redeployer or Redeployer(supervisor)
    app.state.launch_commands = launch_commands or {
        "signaling": split_command(SIGNALING_COMMAND),
        "client": split_command(CLIENT_COMMAND),
    }
    app.state.commit_reader = commit_reader
    app.state.log_tail_lines = log_tail_lines

    supervisor.add_listener(_log_exit)
    app.include_router(processes_router)

    logger.info("Controller application initialized")
    return app


def _log_exit(event: ProcessExit) -> None:
    outcome = "cleanly" if event.returncode == 0 else f"with code {event.returncode}"
    logger.info(f"Managed process {event.name} (pid {event.pid}) finished {outcome}")


def log_endpoints() -> None:
    logger.info("Endpoints:")
    logger.info("  GET  /status")
    logger.info("  POST /signaling/start")
    logger.info("  POST /signaling/stop")
    logger.info("  GET  /signaling/logs")
    logger.info("  POST /client/start")
    logger.info("  POST /client/stop")
    logger.info("  GET  /client/logs")
    logger.info("  POST /pull")
