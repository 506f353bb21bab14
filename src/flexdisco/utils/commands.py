"""Subprocess helpers for host-side lookups."""

import asyncio
import logging
import subprocess
from typing import List, Optional, Union
from dataclasses import dataclass


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Captured output of a finished command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""


async def _spawn(cmd: Union[str, List[str]]) -> asyncio.subprocess.Process:
    pipe = asyncio.subprocess.PIPE
    if isinstance(cmd, str):
        return await asyncio.create_subprocess_shell(cmd, stdout=pipe, stderr=pipe)
    return await asyncio.create_subprocess_exec(*cmd, stdout=pipe, stderr=pipe)


async def run_command(
    cmd: Union[str, List[str]],
    check: bool = True,
    timeout: Optional[float] = None,
) -> CommandResult:
    """Run a command and capture its output.

    A string is run through ``/bin/sh`` so pipelines work; a list is executed
    directly. The process is killed when ``timeout`` elapses and
    ``subprocess.TimeoutExpired`` is raised. With ``check`` a non-zero exit
    raises ``subprocess.CalledProcessError`` carrying the captured output.
    Output is decoded leniently since it can come from arbitrary containers.
    """
    display = cmd if isinstance(cmd, str) else " ".join(cmd)
    logger.debug(f"Running command: {display}")

    process = await _spawn(cmd)
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        logger.debug(f"Command timed out after {timeout}s: {display}")
        raise subprocess.TimeoutExpired(cmd, timeout)

    result = CommandResult(
        returncode=process.returncode,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
    )

    if check and result.returncode != 0:
        raise subprocess.CalledProcessError(
            result.returncode, cmd, output=result.stdout, stderr=result.stderr
        )

    return result
