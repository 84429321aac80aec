"""docextract CLI Package.

Usage:
    python -m docextract.cli run --config config/docextract.yaml
    python -m docextract.cli run --input-dir data --dry-run
    python -m docextract.cli validate config/docextract.yaml
    python -m docextract.cli setup --region us-central1
    python -m docextract.cli models --project-id my-project
    python -m docextract.cli check --no-api-call
"""

import typer

from docextract.cli.check import check_command
from docextract.cli.run import run_command
from docextract.cli.setup import models_command, setup_command
from docextract.cli.validate import validate_command

app = typer.Typer(help="docextract: rate-limited batch document extraction")

app.command(name="run")(run_command)
app.command(name="validate")(validate_command)
app.command(name="setup")(setup_command)
app.command(name="models")(models_command)
app.command(name="check")(check_command)

__all__ = [
    "app",
    "check_command",
    "models_command",
    "run_command",
    "setup_command",
    "validate_command",
]
