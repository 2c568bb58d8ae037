"""HTTP server for the Rubrik Prometheus Exporter."""

import contextlib
import json
import logging
import os
import pathlib
from collections.abc import Callable

import httpx
import prometheus_client
import prometheus_client.core
import pydantic
import starlette.applications
import starlette.concurrency
import starlette.requests
import starlette.responses
import starlette.routing
import structlog

from . import collector, rubrikapi
from .collectors import (
    archive,
    health,
    jobs,
    managed_volumes,
    nodes,
    storage,
    virtual_machines,
)
from .rubrikapi import client as rubrik_client

CONFIG_ENV_VAR = "RUBRIK_EXPORTER_CONFIG_PATH"

# Secrets may be kept out of the config file
SECRET_ENV_VARS = {
    "password": "RUBRIK_PASSWORD",
    "service_account_client_secret": "RUBRIK_SERVICE_ACCOUNT_CLIENT_SECRET",
}

logger = structlog.get_logger(__name__)


class ExporterConfig(pydantic.BaseModel):
    """Configuration for the Rubrik Prometheus Exporter."""

    rubrik_url: str = pydantic.Field(description="Base URL of the Rubrik appliance")
    username: str = pydantic.Field("", description="Rubrik API user")
    password: str = pydantic.Field("", description="Rubrik API user password")
    service_account_client_id: str = pydantic.Field(
        "",
        description="Rubrik service account client ID",
    )
    service_account_client_secret: str = pydantic.Field(
        "",
        description="Rubrik service account client secret",
    )
    verify_tls: bool = pydantic.Field(
        False,
        description="Verify the appliance's TLS certificate",
    )
    timeout: float = pydantic.Field(
        rubrikapi.DEFAULT_TIMEOUT,
        description="Per-request timeout in seconds",
        gt=0,
    )
    graphql_enabled: bool = pydantic.Field(
        True,
        description="Try the GraphQL API before falling back to REST",
    )
    physical_ingest_range: str = pydantic.Field(
        rubrik_client.DEFAULT_PHYSICAL_INGEST_RANGE,
        description="Relative range of the physical ingest time series",
    )
    archival_bandwidth_range: str = pydantic.Field(
        rubrik_client.DEFAULT_ARCHIVAL_BANDWIDTH_RANGE,
        description="Relative range of the archival bandwidth time series",
    )
    port: int = pydantic.Field(9477, description="HTTP server port", gt=0, lt=65536)
    metrics_path: str = pydantic.Field(
        "/metrics",
        description="URL path for metrics endpoint",
    )
    log_level: str = pydantic.Field("INFO", description="Logging level")

    @property
    def credentials(self) -> rubrikapi.Credentials:
        return rubrikapi.Credentials(
            username=self.username,
            password=self.password,
            client_id=self.service_account_client_id,
            client_secret=self.service_account_client_secret,
        )


def configure_logging(log_level_name: str) -> None:
    """Configure structlog for logfmt output."""
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.EventRenamer("msg"),
            structlog.processors.format_exc_info,
            structlog.processors.LogfmtRenderer(
                key_order=("timestamp", "level", "msg"),
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def load_config(config_path: str) -> ExporterConfig:
    """Load configuration from JSON file, with secrets overridable by env."""
    path = pathlib.Path(config_path)
    if not path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    with path.open("r") as f:
        data = json.load(f)

    for field_name, env_var in SECRET_ENV_VARS.items():
        if value := os.environ.get(env_var):
            data[field_name] = value

    return ExporterConfig(**data)


def create_registry_with_collectors(
    rubrik: rubrikapi.RubrikClient,
    config: ExporterConfig,
) -> prometheus_client.core.CollectorRegistry:
    """Create a Prometheus registry with Rubrik collectors.

    Creates a custom registry (not the global one) and registers one
    collector per resource area. The client is injected into each fetcher
    at build time. The health collector is registered last so it reports
    the protocols used during the same scrape.

    Args:
        rubrik: Shared Rubrik client for all collectors.
        config: Exporter configuration.

    Returns:
        Configured Prometheus registry with injected dependencies.
    """
    registry = prometheus_client.core.CollectorRegistry()
    description = f"Rubrik {config.rubrik_url}"

    fetchers: list[tuple[str, Callable, Callable]] = [
        ("node", lambda: nodes.fetch(rubrik), nodes.generate_metrics),
        (
            "storage",
            lambda: storage.fetch(rubrik, config.physical_ingest_range),
            storage.generate_metrics,
        ),
        (
            "vm",
            lambda: virtual_machines.fetch(rubrik),
            virtual_machines.generate_metrics,
        ),
        (
            "archive",
            lambda: archive.fetch(rubrik, config.archival_bandwidth_range),
            archive.generate_metrics,
        ),
        (
            "managed_volume",
            lambda: managed_volumes.fetch(rubrik),
            managed_volumes.generate_metrics,
        ),
        ("task", lambda: jobs.fetch(rubrik), jobs.generate_metrics),
        ("api", lambda: health.fetch(rubrik), health.generate_metrics),
    ]

    for metric_prefix, fetcher, generator in fetchers:
        registry.register(
            collector.RubrikCollector(
                fetcher=fetcher,
                generator=generator,
                metric_prefix=metric_prefix,
                scraper_description=description,
            ),
        )
        logger.info("Registered collector", metric_prefix=metric_prefix)

    return registry


def create_starlette_app(
    metrics_path: str,
    registry: prometheus_client.core.CollectorRegistry,
    on_shutdown: Callable[[], None] | None = None,
) -> starlette.applications.Starlette:
    """Create a Starlette application for serving Prometheus metrics.

    Args:
        metrics_path: URL path for metrics endpoint (e.g., "/metrics").
        registry: Prometheus collector registry.
        on_shutdown: Optional blocking cleanup run in the threadpool when the
            application stops.

    Returns:
        Configured Starlette application.
    """

    def metrics_endpoint(
        request: starlette.requests.Request,
    ) -> starlette.responses.Response:
        """Generate and serve Prometheus metrics."""
        metrics_output = prometheus_client.generate_latest(registry)
        logger.info(
            "HTTP request",
            client_ip=request.client.host if request.client else "unknown",
            method=request.method,
            path=request.url.path,
            user_agent=request.headers.get("user-agent", ""),
        )
        return starlette.responses.PlainTextResponse(
            content=metrics_output,
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    @contextlib.asynccontextmanager
    async def lifespan(app: starlette.applications.Starlette):
        yield
        if on_shutdown is not None:
            await starlette.concurrency.run_in_threadpool(on_shutdown)

    routes = [
        starlette.routing.Route(metrics_path, metrics_endpoint, methods=["GET"]),
    ]

    return starlette.applications.Starlette(routes=routes, lifespan=lifespan)


def create_exporter(
    config: ExporterConfig,
    http_transport: httpx.BaseTransport | None = None,
) -> starlette.applications.Starlette:
    """Construct the exporter ASGI app from validated config.

    Authenticates against the appliance before anything is served.

    Args:
        config: Validated exporter configuration.
        http_transport: Optional httpx transport shared by all HTTP clients,
            mainly for tests.

    Raises:
        AuthError: If no authentication strategy produced a token.
    """
    session_manager = rubrikapi.SessionManager(
        base_url=config.rubrik_url,
        verify_tls=config.verify_tls,
        timeout=config.timeout,
        transport=http_transport,
    )
    session = session_manager.authenticate(config.credentials)
    logger.info("Authenticated against Rubrik", base_url=config.rubrik_url)

    transport = rubrikapi.RestTransport(
        base_url=config.rubrik_url,
        session=session,
        verify_tls=config.verify_tls,
        timeout=config.timeout,
        transport=http_transport,
    )
    graphql = None
    if config.graphql_enabled:
        graphql = rubrikapi.GraphQueryClient(
            base_url=config.rubrik_url,
            session=session,
            verify_tls=config.verify_tls,
            timeout=config.timeout,
            transport=http_transport,
        )
        logger.info("GraphQL enabled", endpoint=graphql.endpoint)
    rubrik = rubrikapi.RubrikClient(transport=transport, graphql=graphql)

    registry = create_registry_with_collectors(rubrik=rubrik, config=config)

    def shutdown() -> None:
        # Only this thread's HTTP clients are closed here. Clients opened by
        # metrics worker threads are released when the process exits.
        rubrik.close()
        session_manager.logout(session)

    return create_starlette_app(
        metrics_path=config.metrics_path,
        registry=registry,
        on_shutdown=shutdown,
    )


def create_app(config_path: str | None = None) -> starlette.applications.Starlette:
    """Create the exporter ASGI app using a config path or environment default."""
    resolved_path = config_path or os.environ.get(CONFIG_ENV_VAR, "/config.json")
    config = load_config(resolved_path)
    configure_logging(config.log_level)
    return create_exporter(config)
