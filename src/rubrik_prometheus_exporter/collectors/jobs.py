"""Protection task outcome collector for Rubrik.

Reports the outcome counts (succeeded, failed, canceled, ...) from the
appliance's canned protection task report.
"""

from collections.abc import Iterator

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric

from .. import rubrikapi


def fetch(client: rubrikapi.RubrikClient) -> dict[str, float]:
    """Fetch task outcome counts keyed by lower-cased outcome label."""
    return client.get_task_details()


def generate_metrics(outcomes: dict[str, float]) -> Iterator[Metric]:
    """Generate a task count gauge labeled by outcome.

    Args:
        outcomes: Mapping of outcome label to count.

    Yields:
        Prometheus Metric objects.
    """
    task_count = GaugeMetricFamily(
        "rubrik_task_count",
        "Protection tasks per outcome reported by the task report",
        labels=["status"],
    )
    for status, count in sorted(outcomes.items()):
        task_count.add_metric([status], count)
    yield task_count
