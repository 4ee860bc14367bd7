"""Process launching and system introspection tools."""

import asyncio
import json
import logging
import os
import platform
import shlex
import sys
from typing import Any

from pydantic import BaseModel, Field

from toolchat_server.provider.server import CapabilityServer, ToolEnvelope, text_content

logger = logging.getLogger(__name__)

# How long to wait for a launched application before reporting it as running
LAUNCH_GRACE_SECONDS = 1.0


class LaunchAppArgs(BaseModel):
    appName: str = Field(..., description="Name or path of the application to launch")


def launch_command(app_name: str, system: str | None = None) -> list[str]:
    """Build the argv that launches an application on the given platform."""
    system = system or platform.system()
    if system == "Windows":
        return ["cmd", "/c", "start", "", app_name]
    if system == "Darwin":
        return ["open", "-a", app_name]
    return shlex.split(app_name)


def _memory_info() -> dict[str, int] | None:
    try:
        page_size = os.sysconf("SC_PAGE_SIZE")
        return {
            "total": page_size * os.sysconf("SC_PHYS_PAGES"),
            "free": page_size * os.sysconf("SC_AVPHYS_PAGES"),
        }
    except (AttributeError, ValueError, OSError):
        return None


def system_info() -> dict[str, Any]:
    return {
        "platform": sys.platform,
        "system": platform.system(),
        "release": platform.release(),
        "architecture": platform.machine(),
        "pythonVersion": platform.python_version(),
        "cpuCount": os.cpu_count(),
        "memory": _memory_info(),
    }


def register(server: CapabilityServer) -> None:
    @server.tool("launchApp", "Launch an application", LaunchAppArgs)
    async def launch_app(args: LaunchAppArgs) -> ToolEnvelope:
        command = launch_command(args.appName)
        if not command:
            raise ValueError("No application given")

        # The app outlives this call, so nothing is left to drain its output
        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        try:
            returncode = await asyncio.wait_for(
                process.wait(), timeout=LAUNCH_GRACE_SECONDS
            )
        except asyncio.TimeoutError:
            logger.info(f"Launched {args.appName} (pid {process.pid})")
            return text_content(
                f"Application launched successfully. Process ID: {process.pid}"
            )

        if returncode != 0:
            raise RuntimeError(f"{args.appName} exited with status {returncode}")
        return text_content(
            f"Application launched successfully. Process ID: {process.pid}"
        )

    @server.tool("getSystemInfo", "Get information about the system")
    async def get_system_info(args: BaseModel) -> ToolEnvelope:
        return text_content(json.dumps(system_info(), indent=2))
