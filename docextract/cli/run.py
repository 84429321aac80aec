"""Run command for a batch extraction.

Handles batch execution and result display.
"""

import asyncio
from pathlib import Path
from typing import List, Optional

import typer

from docextract.cli.utils import (
    display_error,
    display_info,
    display_success,
    display_warning,
    handle_errors,
    load_config,
)
from docextract.models.batch import BatchResult, UnitOfWork
from docextract.models.config import AppConfig
from docextract.observability.metrics import get_metrics_text
from docextract.orchestration.batch_driver import BatchDriver
from docextract.orchestration.request_queue import RequestQueue
from docextract.services.document_enumerator import DocumentEnumerator
from docextract.services.ledger_service import ExtractionLedger
from docextract.services.vertex_client import VertexAIClient


@handle_errors
def run_command(
    config_path: Path = typer.Option(
        "config/docextract.yaml",
        "--config",
        "-c",
        help="Path to run config YAML",
    ),
    input_dir: Optional[Path] = typer.Option(
        None, "--input-dir", "-i", help="Override batch.input_dir"
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", "-o", help="Override batch.output_dir"
    ),
    log_dir: Optional[Path] = typer.Option(
        None, "--log-dir", help="Override batch.log_dir"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="List the documents that would be processed"
    ),
    metrics_file: Optional[Path] = typer.Option(
        None, "--metrics-file", help="Write Prometheus metrics here after the run"
    ),
):
    """Extract structured data from every document under the input directory."""
    config = load_config(config_path)
    _apply_overrides(config, input_dir, output_dir, log_dir)

    enumerator = DocumentEnumerator.from_config(config.batch)
    units = enumerator.enumerate()

    if dry_run:
        _display_dry_run(config, units)
        return

    display_info(
        f"Processing {len(units)} documents from {config.batch.input_dir} "
        f"with {config.vertex.model_id}..."
    )

    result = asyncio.run(run_batch(config, units))

    _display_results(result)

    if metrics_file is not None:
        metrics_file.parent.mkdir(parents=True, exist_ok=True)
        metrics_file.write_bytes(get_metrics_text())
        display_info(f"Metrics written to {metrics_file}")


async def run_batch(config: AppConfig, units: List[UnitOfWork]) -> BatchResult:
    """Wire the queue, ledger and Vertex client together and run the batch."""
    request_queue = RequestQueue(config.queue)
    ledger = ExtractionLedger(config.batch.log_dir)

    async with VertexAIClient(config.vertex) as client:
        driver = BatchDriver(
            config=config.batch,
            request_queue=request_queue,
            ledger=ledger,
            processor=client.extract_document,
        )
        return await driver.run(units)


def _apply_overrides(
    config: AppConfig,
    input_dir: Optional[Path],
    output_dir: Optional[Path],
    log_dir: Optional[Path],
) -> None:
    if input_dir is not None:
        config.batch.input_dir = input_dir
    if output_dir is not None:
        config.batch.output_dir = output_dir
    if log_dir is not None:
        config.batch.log_dir = log_dir


def _display_dry_run(config: AppConfig, units: List[UnitOfWork]) -> None:
    display_success("Dry run: Configuration valid.")
    typer.echo(f"Found {len(units)} documents in {config.batch.input_dir}:")
    for unit in units:
        typer.echo(f" - {unit.display_name} -> {unit.output_path}")

    queue = config.queue
    display_info("\nAdmission control:")
    typer.echo(
        f" - Token bucket: {queue.max_tokens} tokens, "
        f"+{queue.refill_tokens} every {queue.refill_interval_seconds}s"
    )
    typer.echo(f" - Max concurrent requests: {queue.max_concurrent_requests}")
    typer.echo(f" - Max concurrent units: {config.batch.max_concurrent_units}")
    typer.echo(
        f" - Retries: {config.batch.retry.max_attempts} outer attempts, "
        f"{queue.max_rate_limit_retries} inner rate-limit retries"
    )


def _display_results(result: BatchResult) -> None:
    stats = result.stats
    typer.echo("")
    if result.all_succeeded:
        display_success(f"✓ All {stats.total_units} documents processed")
    else:
        display_warning(
            f"Processed {stats.total_units} documents: "
            f"{stats.units_succeeded} succeeded, {stats.units_failed} failed"
        )
        for name in result.failed_units:
            display_error(f" ✗ {name}")

    typer.echo(f"Duration: {stats.total_duration_seconds:.1f}s")
    typer.echo(f"Success log: {result.success_log}")
    typer.echo(f"Failure log: {result.failure_log}")
