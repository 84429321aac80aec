"""Async wrapper around the gcloud CLI."""

import asyncio
import shutil

from docextract.observability.logging import get_logger
from docextract.utils.exceptions import GCloudCommandError

logger = get_logger("gcloud")


async def run_gcloud(*args: str, timeout_seconds: float = 60.0) -> str:
    """Run ``gcloud <args>`` and return its stripped stdout.

    Args:
        *args: Arguments passed to gcloud
        timeout_seconds: Kill the process if it runs longer than this

    Raises:
        GCloudCommandError: If gcloud is missing, times out or exits non-zero
    """
    gcloud = shutil.which("gcloud")
    if gcloud is None:
        raise GCloudCommandError("gcloud CLI not found on PATH")

    command = " ".join(args)
    logger.debug("gcloud_started", command=command)

    process = await asyncio.create_subprocess_exec(
        gcloud,
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(
            process.communicate(), timeout=timeout_seconds
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        logger.warning("gcloud_timed_out", command=command, timeout=timeout_seconds)
        raise GCloudCommandError(
            f"gcloud {command} timed out after {timeout_seconds}s"
        )

    if process.returncode != 0:
        message = stderr.decode(errors="replace").strip()
        raise GCloudCommandError(
            f"gcloud {command} failed: {message}",
            stderr=message,
            returncode=process.returncode,
        )

    return stdout.decode(errors="replace").strip()
