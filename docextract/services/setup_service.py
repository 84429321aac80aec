"""Google Cloud project setup for Vertex AI.

Everything here shells out to gcloud:
- Enabling the aiplatform API for a project
- Listing the models deployed in a region
- Application-default login and recording the project id in ``.env``
- Checking which credentials the current environment provides
- Sending a short prompt to confirm the endpoint answers
"""

import json
import os
from pathlib import Path
from typing import Any, List, Mapping, Optional

from dotenv import set_key

from docextract.models.config import VertexSettings
from docextract.models.setup import EnvironmentStatus
from docextract.models.vertex import VertexModel
from docextract.observability.logging import get_logger
from docextract.services.auth import get_access_token
from docextract.services.gcloud import run_gcloud
from docextract.services.vertex_client import VertexAIClient
from docextract.utils.exceptions import (
    AuthenticationError,
    GCloudCommandError,
    SetupError,
)

logger = get_logger("setup")

VERTEX_AI_SERVICE = "aiplatform.googleapis.com"
PROJECT_ID_ENV_VAR = "VERTEX_AI_PROJECT_ID"
CREDENTIALS_ENV_VAR = "GOOGLE_APPLICATION_CREDENTIALS"
TEST_MESSAGE = "Hello, this is a test message."

# gcloud reports an empty model list as a failure with this text
NO_RESOURCES_MARKER = "not find any resources"

# Interactive browser login can take a while
LOGIN_TIMEOUT_SECONDS = 600.0


def _parse_json_list(output: str, what: str) -> List[Any]:
    if not output:
        return []
    try:
        parsed = json.loads(output)
    except json.JSONDecodeError as e:
        raise SetupError(f"Failed to parse {what} output: {e}") from e
    if not isinstance(parsed, list):
        raise SetupError(f"Expected a JSON list from {what}")
    return parsed


async def is_vertex_ai_enabled(project_id: str) -> bool:
    """Check whether the aiplatform API is enabled for the project.

    Raises:
        SetupError: If the enabled services cannot be listed
    """
    try:
        output = await run_gcloud(
            "services", "list", "--project", project_id, "--format=json"
        )
    except GCloudCommandError as e:
        raise SetupError(f"Failed to list services: {e}") from e

    services = _parse_json_list(output, "gcloud services list")
    return any(
        VERTEX_AI_SERVICE in ((service.get("config") or {}).get("name") or "")
        for service in services
        if isinstance(service, dict)
    )


async def ensure_vertex_ai_service(project_id: str) -> bool:
    """Enable the Vertex AI API for the project if it is not enabled yet.

    Returns:
        True if the service was enabled by this call, False if it already was

    Raises:
        SetupError: If the service cannot be listed or enabled
    """
    if await is_vertex_ai_enabled(project_id):
        logger.info("vertex_ai_already_enabled", project_id=project_id)
        return False

    logger.info("enabling_vertex_ai", project_id=project_id)
    try:
        await run_gcloud(
            "services",
            "enable",
            VERTEX_AI_SERVICE,
            "--project",
            project_id,
            timeout_seconds=300.0,
        )
    except GCloudCommandError as e:
        raise SetupError(f"Failed to enable Vertex AI service: {e}") from e

    logger.info("vertex_ai_enabled", project_id=project_id)
    return True


async def list_vertex_ai_models(project_id: str, region: str) -> List[VertexModel]:
    """List the models registered in a project region.

    Raises:
        SetupError: If gcloud fails for any reason other than an empty list
    """
    try:
        output = await run_gcloud(
            "ai",
            "models",
            "list",
            "--region",
            region,
            "--project",
            project_id,
            "--format=json",
        )
    except GCloudCommandError as e:
        if NO_RESOURCES_MARKER in e.stderr:
            return []
        raise SetupError(f"Failed to list models: {e}") from e

    entries = _parse_json_list(output, "gcloud ai models list")
    models = [
        VertexModel.model_validate(entry)
        for entry in entries
        if isinstance(entry, dict) and entry.get("name")
    ]
    logger.info("vertex_models_listed", region=region, count=len(models))
    return models


async def get_project_id() -> str:
    """Return the project configured in gcloud.

    Raises:
        SetupError: If no project is set
    """
    try:
        project_id = await run_gcloud("config", "get-value", "project")
    except GCloudCommandError as e:
        raise SetupError(f"Failed to read gcloud project: {e}") from e

    if not project_id or project_id == "(unset)":
        raise SetupError(
            "No Google Cloud project is set. "
            "Run 'gcloud config set project PROJECT_ID' first."
        )
    return project_id


def write_project_env(env_path: Path, project_id: str) -> None:
    """Record the project id in a dotenv file, keeping its other keys."""
    env_path = Path(env_path)
    env_path.parent.mkdir(parents=True, exist_ok=True)
    env_path.touch(exist_ok=True)
    set_key(str(env_path), PROJECT_ID_ENV_VAR, project_id, quote_mode="never")


async def setup_authentication(env_path: Path = Path(".env")) -> str:
    """Log in with application-default credentials and record the project.

    Returns:
        The project id written to ``env_path``

    Raises:
        SetupError: If login fails or no project is configured
    """
    try:
        await run_gcloud(
            "auth",
            "application-default",
            "login",
            "--quiet",
            timeout_seconds=LOGIN_TIMEOUT_SECONDS,
        )
    except GCloudCommandError as e:
        raise SetupError(
            f"Failed to set up application default credentials: {e}"
        ) from e

    project_id = await get_project_id()
    write_project_env(env_path, project_id)

    logger.info(
        "authentication_configured", project_id=project_id, env_file=str(env_path)
    )
    return project_id


async def check_environment(
    environ: Optional[Mapping[str, str]] = None,
) -> EnvironmentStatus:
    """Report the project, credentials file and token the environment provides."""
    environ = os.environ if environ is None else environ

    credentials_path = environ.get(CREDENTIALS_ENV_VAR) or None
    status = EnvironmentStatus(
        project_id=environ.get(PROJECT_ID_ENV_VAR) or None,
        credentials_path=credentials_path,
        credentials_file_exists=bool(
            credentials_path and Path(credentials_path).is_file()
        ),
    )

    try:
        await get_access_token()
    except AuthenticationError as e:
        status.access_token_error = str(e)
    else:
        status.access_token_available = True

    return status


async def verify_api_call(
    settings: VertexSettings, message: str = TEST_MESSAGE
) -> str:
    """Send a short prompt to the configured model and return its reply.

    Raises:
        RemoteCallError: If the request fails
    """
    async with VertexAIClient(settings) as client:
        reply = await client.generate_text(message)

    logger.info("vertex_api_call_succeeded", model=settings.model_id)
    return reply
