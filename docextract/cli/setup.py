"""Setup and models commands for preparing a Google Cloud project."""

import asyncio
from pathlib import Path
from typing import List, Optional

import typer

from docextract.cli.utils import (
    display_info,
    display_success,
    display_warning,
    handle_errors,
)
from docextract.models.vertex import VertexModel
from docextract.services.setup_service import (
    PROJECT_ID_ENV_VAR,
    ensure_vertex_ai_service,
    get_project_id,
    list_vertex_ai_models,
    setup_authentication,
)


@handle_errors
def setup_command(
    project_id: Optional[str] = typer.Option(
        None,
        "--project-id",
        "-p",
        envvar=PROJECT_ID_ENV_VAR,
        help="Google Cloud project (defaults to the gcloud config project)",
    ),
    region: str = typer.Option("us-central1", "--region", "-r", help="Model region"),
    skip_auth: bool = typer.Option(
        False, "--skip-auth", help="Skip application-default login"
    ),
    env_file: Path = typer.Option(
        Path(".env"), "--env-file", help="Where to record VERTEX_AI_PROJECT_ID"
    ),
):
    """Log in, enable the Vertex AI API and list the project's models."""
    project_id, enabled, models = asyncio.run(
        _run_setup(project_id, region, skip_auth, env_file)
    )

    if enabled:
        display_success(f"✓ Enabled Vertex AI API for {project_id}")
    else:
        display_success(f"✓ Vertex AI API already enabled for {project_id}")

    _display_models(models, region)
    display_success("Setup complete.")


@handle_errors
def models_command(
    project_id: Optional[str] = typer.Option(
        None,
        "--project-id",
        "-p",
        envvar=PROJECT_ID_ENV_VAR,
        help="Google Cloud project (defaults to the gcloud config project)",
    ),
    region: str = typer.Option("us-central1", "--region", "-r", help="Model region"),
):
    """List the Vertex AI models registered in a project region."""

    async def _list() -> List[VertexModel]:
        project = project_id or await get_project_id()
        return await list_vertex_ai_models(project, region)

    _display_models(asyncio.run(_list()), region)


async def _run_setup(
    project_id: Optional[str],
    region: str,
    skip_auth: bool,
    env_file: Path,
) -> tuple:
    if not skip_auth:
        display_info("Setting up application-default credentials...")
        configured = await setup_authentication(env_file)
        display_success(f"✓ Authenticated; project recorded in {env_file}")
        project_id = project_id or configured
    elif project_id is None:
        project_id = await get_project_id()

    enabled = await ensure_vertex_ai_service(project_id)
    models = await list_vertex_ai_models(project_id, region)
    return project_id, enabled, models


def _display_models(models: List[VertexModel], region: str) -> None:
    if not models:
        display_warning(f"No custom models found in {region}")
        typer.echo("Publisher models such as gemini-2.0-flash-exp remain available.")
        return

    display_info(f"Found {len(models)} Vertex AI models in {region}:")
    for model in models:
        label = model.display_name or model.model_id
        typer.echo(f" - {label} ({model.name})")
        if model.description:
            typer.echo(f"   {model.description}")
