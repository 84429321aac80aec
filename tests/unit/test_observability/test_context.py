"""Tests for correlation ID context management."""

import asyncio

import pytest

from docextract.observability.context import (
    correlation_id_context,
    get_correlation_id,
    new_run_id,
)


def test_no_correlation_id_outside_context():
    assert get_correlation_id() is None


def test_new_run_ids_are_short_and_unique():
    ids = {new_run_id() for _ in range(100)}

    assert len(ids) == 100
    assert all(len(run_id) == 12 for run_id in ids)


class TestCorrelationIdContext:
    """Tests for the scoped context manager."""

    def test_uses_provided_id(self):
        with correlation_id_context("run-abc") as corr_id:
            assert corr_id == "run-abc"
            assert get_correlation_id() == "run-abc"

        assert get_correlation_id() is None

    def test_nested_contexts_restore_previous_value(self):
        with correlation_id_context("outer"):
            with correlation_id_context("inner") as corr_id:
                assert corr_id == "inner"
                assert get_correlation_id() == "inner"

            assert get_correlation_id() == "outer"

    def test_generates_id(self):
        with correlation_id_context() as corr_id:
            assert len(corr_id) == 12
            assert get_correlation_id() == corr_id

        assert get_correlation_id() is None

    def test_restores_on_exception(self):
        with pytest.raises(ValueError):
            with correlation_id_context("failing"):
                raise ValueError("boom")

        assert get_correlation_id() is None

    @pytest.mark.asyncio
    async def test_propagates_into_gathered_tasks(self):
        async def read_id():
            await asyncio.sleep(0)
            return get_correlation_id()

        with correlation_id_context("batch-run"):
            results = await asyncio.gather(*(read_id() for _ in range(5)))

        assert results == ["batch-run"] * 5
