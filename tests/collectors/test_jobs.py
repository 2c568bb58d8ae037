"""Tests for the task outcome collector module."""

from unittest.mock import MagicMock

from rubrik_prometheus_exporter.collectors import jobs
from rubrik_prometheus_exporter.rubrikapi import client


def test_fetch_returns_task_details():
    mock_client = MagicMock(spec=client.RubrikClient)
    mock_client.get_task_details.return_value = {"succeeded": 3.0}

    assert jobs.fetch(mock_client) == {"succeeded": 3.0}


def test_task_count_per_status():
    outcomes = {"succeeded": 3.0, "failed": 1.0, "canceled": 2.0}

    family = next(jobs.generate_metrics(outcomes))

    assert family.name == "rubrik_task_count"
    actual = {s.labels["status"]: s.value for s in family.samples}
    assert actual == outcomes


def test_task_count_sorted_by_status():
    family = next(jobs.generate_metrics({"succeeded": 1.0, "canceled": 1.0}))

    assert [s.labels["status"] for s in family.samples] == ["canceled", "succeeded"]


def test_task_count_empty_when_report_unavailable():
    """An unavailable report yields the family without samples."""
    family = next(jobs.generate_metrics({}))

    assert family.samples == []
