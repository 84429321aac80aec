"""Concurrent batch driver.

Feeds discovered units of work through the RequestQueue with:
- Semaphore-bounded fan-out of in-flight units
- Outer retry with exponential backoff on rate-limit failures
- Fail-fast on any other failure
- Units whose output paths collide fail instead of overwriting each other
- Durable SUCCESS/FAILED ledger entries for every unit
- Progress reporting as units complete (unordered)
"""

import asyncio
import functools
import json
import time
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

from docextract.models.batch import BatchConfig, BatchResult, BatchStats, UnitOfWork
from docextract.models.ledger import ExtractionLogEntry
from docextract.observability.context import correlation_id_context
from docextract.observability.logging import get_logger
from docextract.observability.metrics import (
    RATE_LIMIT_RETRIES,
    UNIT_PROCESSING_DURATION,
    UNITS_PROCESSED,
)
from docextract.orchestration.request_queue import RequestQueue
from docextract.services.document_enumerator import DocumentEnumerator
from docextract.services.ledger_service import ExtractionLedger
from docextract.utils.exceptions import RateLimitError, RetryExhaustedError
from docextract.utils.retry import RetryHandler

logger = get_logger("batch_driver")

DocumentProcessor = Callable[[bytes], Awaitable[Any]]


class BatchDriver:
    """Batch driver for one extraction run.

    Two independent caps apply: ``max_concurrent_units`` bounds how many
    units run at once here, and the RequestQueue's gate bounds how many
    remote calls run at once.
    """

    def __init__(
        self,
        config: BatchConfig,
        request_queue: RequestQueue,
        ledger: ExtractionLedger,
        processor: DocumentProcessor,
        enumerator: Optional[DocumentEnumerator] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize batch driver.

        Args:
            config: Batch configuration (fan-out limit, outer retry policy)
            request_queue: Shared admission control for remote calls
            ledger: Outcome ledger
            processor: Remote call taking document bytes, returning JSON data
            enumerator: Unit source (built from config when omitted)
            sleep: Awaitable sleep used for outer backoff
        """
        self.config = config
        self.request_queue = request_queue
        self.ledger = ledger
        self.processor = processor
        self.enumerator = enumerator or DocumentEnumerator.from_config(config)
        self.retry_handler = RetryHandler(config.retry, sleep=sleep)

        self.unit_sem = asyncio.Semaphore(config.max_concurrent_units)

        self.stats = BatchStats()
        self.failed_units: List[str] = []

        logger.info(
            "batch_driver_initialized",
            max_concurrent_units=config.max_concurrent_units,
            max_retries=config.retry.max_attempts,
            base_delay_seconds=config.retry.base_delay_seconds,
        )

    async def run(
        self,
        units: Optional[List[UnitOfWork]] = None,
        run_id: Optional[str] = None,
    ) -> BatchResult:
        """Process every unit and return the run summary.

        Args:
            units: Units to process; enumerated from the input root if omitted
            run_id: Correlation id for the run (generated if omitted)

        Returns:
            BatchResult with final statistics and ledger locations

        Raises:
            OSError: If the input root cannot be enumerated
        """
        start_time = time.monotonic()
        self.stats = BatchStats()
        self.failed_units = []

        with correlation_id_context(run_id) as run_id:
            if units is None:
                units = self.enumerator.enumerate()

            self.stats.total_units = len(units)
            logger.info("batch_started", run_id=run_id, total_units=len(units))

            runnable = []
            claimed: Dict[Path, UnitOfWork] = {}
            for unit in units:
                owner = claimed.setdefault(unit.output_path, unit)
                if owner is unit:
                    runnable.append(unit)
                else:
                    await self._record_collision(unit, owner)

            if runnable:
                outcomes = await asyncio.gather(
                    *(self._run_unit(unit) for unit in runnable),
                    return_exceptions=True,
                )
                errors = [o for o in outcomes if isinstance(o, BaseException)]
                for error in errors:
                    logger.error("unit_task_crashed", error=str(error))
                if errors:
                    raise errors[0]
            elif not units:
                logger.info("no_units_to_process", run_id=run_id)

            self.stats.total_duration_seconds = time.monotonic() - start_time

            logger.info(
                "batch_complete",
                run_id=run_id,
                total_units=self.stats.total_units,
                succeeded=self.stats.units_succeeded,
                failed=self.stats.units_failed,
                exhausted=self.stats.units_exhausted,
                rate_limit_retries=self.stats.rate_limit_retries,
                duration_seconds=round(self.stats.total_duration_seconds, 2),
            )

        return BatchResult(
            run_id=run_id,
            stats=self.stats,
            success_log=self.ledger.success_log,
            failure_log=self.ledger.failure_log,
            failed_units=sorted(self.failed_units),
        )

    async def _run_unit(self, unit: UnitOfWork) -> None:
        async with self.unit_sem:
            self.stats.in_flight_units += 1
            try:
                await self.process_unit(unit)
            finally:
                self.stats.in_flight_units -= 1

        self._report_progress()

    async def _record_collision(self, unit: UnitOfWork, owner: UnitOfWork) -> None:
        """Fail a unit whose output file another unit already writes."""
        start_time = time.monotonic()
        logger.error(
            "unit_output_collision",
            file_path=unit.display_name,
            output_path=str(unit.output_path),
            owner=owner.display_name,
        )
        entry = ExtractionLogEntry.failure(
            unit.display_name,
            f"Output path {unit.output_path} collides with {owner.display_name}",
        )
        await self._record(unit, entry, "failed", start_time)
        self._report_progress()

    async def process_unit(self, unit: UnitOfWork) -> ExtractionLogEntry:
        """Process one unit to a terminal outcome and record it.

        Returns:
            The ledger entry that was appended
        """
        start_time = time.monotonic()
        log = logger.bind(file_path=unit.display_name)
        log.debug("unit_started")

        status = "failed"
        try:
            document = await asyncio.to_thread(unit.source_path.read_bytes)
            result = await self.retry_handler.execute(
                functools.partial(self._attempt, document),
                retryable_exceptions={RateLimitError},
                on_retry=self._on_outer_retry,
            )
            await asyncio.to_thread(self._write_output, unit, result)

        except RetryExhaustedError as e:
            status = "exhausted"
            self.stats.units_exhausted += 1
            entry = ExtractionLogEntry.failure(unit.display_name, str(e))
            log.error("unit_retries_exhausted", attempts=e.attempts, error=str(e))

        except OSError as e:
            entry = ExtractionLogEntry.failure(unit.display_name, f"I/O error: {e}")
            log.error("unit_io_failed", error=str(e))

        except Exception as e:
            entry = ExtractionLogEntry.failure(
                unit.display_name, str(e) or type(e).__name__
            )
            log.error("unit_failed", error_type=type(e).__name__, error=str(e))

        else:
            status = "success"
            entry = ExtractionLogEntry.success(unit.display_name)
            log.info("unit_succeeded", output_path=str(unit.output_path))

        await self._record(unit, entry, status, start_time)
        return entry

    async def _record(
        self,
        unit: UnitOfWork,
        entry: ExtractionLogEntry,
        status: str,
        start_time: float,
    ) -> None:
        await asyncio.to_thread(self.ledger.append, entry)

        if status == "success":
            self.stats.units_succeeded += 1
        else:
            self.stats.units_failed += 1
            self.failed_units.append(unit.display_name)

        UNITS_PROCESSED.labels(status=status).inc()
        UNIT_PROCESSING_DURATION.observe(time.monotonic() - start_time)

    async def _attempt(self, document: bytes) -> Any:
        return await self.request_queue.execute(
            functools.partial(self.processor, document)
        )

    def _on_outer_retry(self, attempt: int, error: Exception, delay: float) -> None:
        self.stats.rate_limit_retries += 1
        RATE_LIMIT_RETRIES.labels(layer="outer").inc()

    def _write_output(self, unit: UnitOfWork, result: Any) -> None:
        """Write the result atomically: temp file, then rename."""
        output_path = unit.output_path
        output_path.parent.mkdir(parents=True, exist_ok=True)

        temp_path = output_path.with_suffix(output_path.suffix + ".tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(result, f, indent=2, ensure_ascii=False)
            temp_path.replace(output_path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise

    def _report_progress(self) -> None:
        completed = self.stats.units_completed
        total = max(1, self.stats.total_units)
        logger.info(
            "progress_update",
            completed=completed,
            total=self.stats.total_units,
            succeeded=self.stats.units_succeeded,
            failed=self.stats.units_failed,
            progress=f"{completed / total:.1%}",
        )

    def get_stats(self) -> BatchStats:
        """Get current batch statistics"""
        return self.stats
