from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse
from typing import Optional

from errors import ExternalCommandError, SupervisorError
from logging_config import get_logger
from schemas.processes import StartClientRequest, StartSignalingRequest
from supervisor import ProcessSupervisor

logger = get_logger(__name__)

processes_router = APIRouter(tags=["processes"])

DISPLAY_NAMES = {
    "signaling": "Signaling server",
    "client": "Client",
}


def _supervisor(request: Request) -> ProcessSupervisor:
    return request.app.state.supervisor


def _start(request: Request, name: str, args: list[str]) -> PlainTextResponse:
    command = request.app.state.launch_commands[name]
    try:
        _supervisor(request).start(name, command, args)
    except SupervisorError as e:
        logger.warning(f"Start {name} rejected: {e}")
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return PlainTextResponse(f"{DISPLAY_NAMES.get(name, name)} started\n")


@processes_router.get("/status")
def status(request: Request):
    supervisor = _supervisor(request)
    response = {"commit": request.app.state.commit_reader()}
    for name in supervisor.names():
        response[f"{name}_running"] = supervisor.is_running(name)
        response[f"{name}_exit_code"] = supervisor.last_exit_code(name)
    return response


@processes_router.post("/signaling/start")
def start_signaling(request: Request, config: Optional[StartSignalingRequest] = None):
    config = config or StartSignalingRequest()
    return _start(request, "signaling", config.to_args())


@processes_router.post("/client/start")
def start_client(request: Request, config: Optional[StartClientRequest] = None):
    # Body: { "room": "default-room", "server": "localhost:8080", "caller": false }, all optional
    config = config or StartClientRequest()
    logger.info(f"Client start request: room={config.room}, server={config.server}, caller={config.caller}")
    return _start(request, "client", config.to_args())


@processes_router.post("/{name}/stop")
def stop_process(name: str, request: Request):
    try:
        _supervisor(request).stop(name)
    except SupervisorError as e:
        logger.warning(f"Stop {name} rejected: {e}")
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return PlainTextResponse(f"{DISPLAY_NAMES.get(name, name)} stopped\n")


@processes_router.get("/{name}/logs")
def process_logs(name: str, request: Request):
    try:
        logs = _supervisor(request).tail_logs(name, request.app.state.log_tail_lines)
    except SupervisorError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return PlainTextResponse(logs)


@processes_router.post("/pull")
def pull(request: Request):
    """Fetch, stop everything, rebuild. Processes are left stopped."""
    try:
        output = request.app.state.redeployer.redeploy()
    except ExternalCommandError as e:
        logger.error(f"Redeploy failed: {e}")
        return PlainTextResponse(f"{e}\nOutput: {e.output}", status_code=500)
    return PlainTextResponse(f"Pull and build successful\nOutput:\n{output}\n")
