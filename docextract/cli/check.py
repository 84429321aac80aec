"""Check command for the Vertex AI environment."""

import asyncio

import typer
from dotenv import load_dotenv

from docextract.cli.utils import (
    display_error,
    display_info,
    display_success,
    display_warning,
    handle_errors,
)
from docextract.models.config import VertexSettings
from docextract.services.setup_service import (
    CREDENTIALS_ENV_VAR,
    PROJECT_ID_ENV_VAR,
    check_environment,
    verify_api_call,
)


@handle_errors
def check_command(
    region: str = typer.Option("us-central1", "--region", "-r", help="Model region"),
    model: str = typer.Option(
        "gemini-2.0-flash-exp", "--model", "-m", help="Model used for the test call"
    ),
    api_call: bool = typer.Option(
        True, "--api-call/--no-api-call", help="Send a short test prompt"
    ),
):
    """Check credentials and, optionally, that the model endpoint answers."""
    load_dotenv()
    status = asyncio.run(check_environment())

    if status.project_id:
        display_success(f"✓ {PROJECT_ID_ENV_VAR}: {status.project_id}")
    else:
        display_error(f"✗ {PROJECT_ID_ENV_VAR} is not set")

    if status.credentials_path is None:
        display_info(f"- {CREDENTIALS_ENV_VAR} not set; using gcloud credentials")
    elif status.credentials_file_exists:
        display_success(f"✓ {CREDENTIALS_ENV_VAR}: {status.credentials_path}")
    else:
        display_warning(
            f"! {CREDENTIALS_ENV_VAR} points to a missing file: "
            f"{status.credentials_path}"
        )

    if status.access_token_available:
        display_success("✓ Access token available")
    else:
        display_error(f"✗ No access token: {status.access_token_error}")

    if not status.ready:
        raise typer.Exit(code=1)

    if not api_call:
        return

    settings = VertexSettings(
        project_id=status.project_id, location=region, model_id=model
    )
    display_info(f"Sending a test prompt to {model} in {region}...")
    try:
        reply = asyncio.run(verify_api_call(settings))
    except Exception as e:
        display_error(f"✗ API request failed: {e}")
        raise typer.Exit(code=1)

    display_success("✓ Vertex AI API call succeeded")
    typer.echo(reply)
