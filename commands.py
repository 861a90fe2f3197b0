import shlex
import subprocess
from typing import Sequence, Union

from constants import COMMIT_COMMAND
from errors import ExternalCommandError
from logging_config import get_logger

logger = get_logger(__name__)

Command = Union[str, Sequence[str]]


def split_command(command: Command) -> list:
    if isinstance(command, str):
        return shlex.split(command)
    return list(command)


def run_command(command: Command) -> str:
    """Run ``command`` to completion and return its combined stdout/stderr.

    Raises ExternalCommandError carrying the captured output when the command
    exits non-zero or cannot be executed at all. There is no timeout.
    """
    cmd = split_command(command)
    logger.info(f"Running: {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True, errors="replace")
    except OSError as e:
        logger.error(f"Could not run {' '.join(cmd)}: {e}")
        raise ExternalCommandError(cmd, -1, str(e)) from e

    if result.returncode != 0:
        logger.warning(f"{' '.join(cmd)} exited with code {result.returncode}")
        raise ExternalCommandError(cmd, result.returncode, result.stdout)
    return result.stdout


def current_commit(command: Command = COMMIT_COMMAND) -> str:
    try:
        return run_command(command).strip()
    except ExternalCommandError as e:
        logger.debug(f"Could not read current commit: {e}")
        return ""
