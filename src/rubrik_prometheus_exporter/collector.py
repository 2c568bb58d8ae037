"""Prometheus collector implementation using composition pattern.

Provides a reusable collector that separates data fetching from metric
generation through dependency injection. Data is fetched fresh on every
scrape; there is no cache.
"""

import time
from collections.abc import Callable, Iterator
from typing import Generic, TypeAlias, TypeVar

import structlog
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily
from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

logger = structlog.get_logger(__name__)

T = TypeVar("T")


Fetcher: TypeAlias = Callable[[], T]
MetricsGenerator: TypeAlias = Callable[[T], Iterator[Metric]]


class RubrikCollector(Collector, Generic[T]):
    """Prometheus collector for Rubrik metrics using composition pattern.

    Separates concerns through dependency injection:
    - Data fetching (via Fetcher function with the client pre-injected)
    - Metric generation (via MetricsGenerator function)
    - Scrape timing and error accounting (managed internally)

    The Rubrik client already degrades upstream failures to empty results,
    so the error counter only moves on unexpected exceptions.
    """

    def __init__(
        self,
        fetcher: Fetcher[T],
        generator: MetricsGenerator[T],
        metric_prefix: str,
        scraper_description: str,
    ):
        """Initialize the Rubrik collector.

        Args:
            fetcher: Zero-argument function that fetches the data.
            generator: Function that generates Prometheus metrics from data.
            metric_prefix: Metric name prefix (e.g., "node", "storage").
            scraper_description: Description of the scraper for metric help
                text (e.g., appliance URL).
        """
        self._fetcher = fetcher
        self._generator = generator
        self._metric_prefix = metric_prefix
        self._scraper_desc = scraper_description

        # Track errors manually (no global Counter registration)
        self._error_count = 0

    def fetch_metrics(self) -> tuple[T, float]:
        """Fetch data from the appliance.

        Returns:
            Tuple of (data, fetch_duration in seconds).
        """
        start = time.time()
        data = self._fetcher()
        duration = time.time() - start
        logger.debug(
            "Fetched fresh data",
            metric_prefix=self._metric_prefix,
            duration_seconds=round(duration, 3),
        )
        return data, duration

    def collect(self) -> Iterator[Metric]:
        """Collect metrics for Prometheus scrape.

        Yields scrape metadata (duration and error count) followed by
        domain-specific metrics from the configured generator function.

        Yields:
            Prometheus Metric objects (metadata + domain metrics).
        """
        data: T | None = None
        fetched = False
        try:
            data, duration_value = self.fetch_metrics()
            fetched = True
        except Exception:
            logger.exception(
                "Failed to fetch metrics for collection",
                metric_prefix=self._metric_prefix,
            )
            self._error_count += 1
            duration_value = -1.0

        # Scrape duration metric (-1 indicates error)
        scrape_duration = GaugeMetricFamily(
            f"rubrik_{self._metric_prefix}_scrape_duration",
            f"scrape duration from {self._scraper_desc} in seconds, "
            f"-1 indicates error",
        )
        scrape_duration.add_metric([], duration_value)
        yield scrape_duration

        error_counter = CounterMetricFamily(
            f"rubrik_{self._metric_prefix}_scrape_error",
            f"rubrik {self._metric_prefix} scrape errors",
        )
        error_counter.add_metric([], self._error_count)
        yield error_counter

        if fetched:
            yield from self._generator(data)  # type: ignore[arg-type]
