from pydantic import BaseModel
from typing import Optional

from constants import DEFAULT_CLIENT_ROOM, DEFAULT_CLIENT_SERVER


class StartClientRequest(BaseModel):
    room: str = DEFAULT_CLIENT_ROOM
    server: str = DEFAULT_CLIENT_SERVER
    caller: bool = False

    def to_args(self) -> list[str]:
        args = ["-room", self.room, "-server", self.server]
        if self.caller:
            args.append("-caller")
        return args


class StartSignalingRequest(BaseModel):
    host: Optional[str] = None
    port: Optional[int] = None

    def to_args(self) -> list[str]:
        args = []
        if self.host is not None:
            args += ["--host", self.host]
        if self.port is not None:
            args += ["--port", str(self.port)]
        return args
