import os
import shlex
import sys

HOST = os.getenv("HOST", "0.0.0.0")
SIGNALING_PORT = int(os.getenv("SIGNALING_PORT", 8080))
CONTROL_PORT = int(os.getenv("CONTROL_PORT", 9090))

DEFAULT_ROOM = os.getenv("DEFAULT_ROOM", "default")

SIGNALING_LOG_FILE = os.getenv("SIGNALING_LOG_FILE", "signaling.log")
CLIENT_LOG_FILE = os.getenv("CLIENT_LOG_FILE", "client.log")

# Shell-style command strings, split with shlex before spawning
SIGNALING_COMMAND = os.getenv("SIGNALING_COMMAND", f"{shlex.quote(sys.executable)} entrypoint.py signaling")
CLIENT_COMMAND = os.getenv("CLIENT_COMMAND", "./clive-cli")
FETCH_COMMAND = os.getenv("FETCH_COMMAND", "git pull origin master")
BUILD_COMMAND = os.getenv("BUILD_COMMAND", "./build.sh")
COMMIT_COMMAND = os.getenv("COMMIT_COMMAND", "git rev-parse HEAD")

LOG_TAIL_LINES = int(os.getenv("LOG_TAIL_LINES", 100))
REDEPLOY_STOP_TIMEOUT = float(os.getenv("REDEPLOY_STOP_TIMEOUT", 10))

DEFAULT_CLIENT_ROOM = "default-room"
DEFAULT_CLIENT_SERVER = "localhost:8080"
