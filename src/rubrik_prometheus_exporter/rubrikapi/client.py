"""Rubrik resource client.

Exposes one retrieval operation per resource category. Each operation tries
the GraphQL API first and falls back to the REST API when the query fails.
If both protocols fail, the operation degrades to an empty result (an empty
list, a zero-valued record, 0, or an empty mapping) instead of raising, so a
scrape always completes. Failures are only visible in the logs and in
:meth:`RubrikClient.protocol_status`.
"""

import threading
import urllib.parse
from collections.abc import Callable
from typing import Any, TypeVar

import pydantic
import structlog

from . import graph_types, queries, transforms, types
from .errors import DecodeError, QueryError, RequestError
from .graphql import GraphQueryClient
from .transport import RestTransport

logger = structlog.get_logger(__name__)

T = TypeVar("T")
G = TypeVar("G", bound=pydantic.BaseModel)

# Protocol outcomes reported by protocol_status()
GRAPHQL = "graphql"
REST = "rest"
FAILED = "failed"

DEFAULT_NODE_STATS_RANGE = "-10min"
DEFAULT_PHYSICAL_INGEST_RANGE = "-10min"
DEFAULT_ARCHIVAL_BANDWIDTH_RANGE = "-1h"

TASK_REPORT_TYPE = "Canned"
TASK_REPORT_TEMPLATE = "ProtectionTasksDetails"
TASK_REPORT_CHART_ID = "chart0"

_TIME_SERIES = pydantic.TypeAdapter(list[types.TimeSeriesPoint])
_REPORT_CHARTS = pydantic.TypeAdapter(list[types.ReportChart])


def _list_of(model: type[T]) -> Callable[[Any], list[T]]:
    """Decoder for a REST list envelope, returning its payload list."""
    envelope = types.ListEnvelope[model]  # type: ignore[valid-type]
    return lambda payload: envelope.model_validate(payload).data


def _segment(value: str) -> str:
    """Escape an identifier for use as a single URL path segment."""
    return urllib.parse.quote(value, safe="")


def _tag_hypervisor(
    decode: Callable[[Any], list[types.VirtualMachine]],
    hypervisor: str,
) -> Callable[[Any], list[types.VirtualMachine]]:
    def _decode(payload: Any) -> list[types.VirtualMachine]:
        return [
            vm.model_copy(update={"hypervisor": hypervisor}) for vm in decode(payload)
        ]

    return _decode


class RubrikClient:
    """Façade over the GraphQL and REST protocols of a Rubrik appliance.

    Stateless apart from the protocol status side channel, so it is safe to
    call from concurrent scrapes.
    """

    def __init__(
        self,
        transport: RestTransport,
        graphql: GraphQueryClient | None = None,
    ):
        """Initialize the client.

        Args:
            transport: REST transport, used as the fallback protocol.
            graphql: GraphQL client. When None, every operation goes
                straight to REST.
        """
        self._transport = transport
        self._graphql = graphql
        self._status_lock = threading.Lock()
        self._protocol_status: dict[str, str] = {}

    def close(self) -> None:
        """Close the underlying HTTP clients."""
        self._transport.close()
        if self._graphql is not None:
            self._graphql.close()

    def protocol_status(self) -> dict[str, str]:
        """Protocol that last served each category: graphql, rest or failed."""
        with self._status_lock:
            return dict(self._protocol_status)

    def _record(self, category: str, outcome: str) -> None:
        with self._status_lock:
            self._protocol_status[category] = outcome

    def _fetch_with_fallback(
        self,
        category: str,
        *,
        query: str,
        response_type: type[G],
        transform: Callable[[G], T],
        path: str,
        decode: Callable[[Any], T],
        empty: Callable[[], T],
        variables: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> T:
        """Try the GraphQL query, falling back to the REST path on failure.

        Args:
            category: Resource category name used in logs and status.
            query: GraphQL query document.
            response_type: Model for the query's ``data`` member.
            transform: Converts the GraphQL response to the domain result.
                May raise QueryError to reject an unusable response.
            path: REST fallback path.
            decode: Converts the REST JSON payload to the domain result.
            empty: Factory for the result returned when both protocols fail.
            variables: GraphQL query variables.
            params: REST query parameters.

        Returns:
            The domain result from whichever protocol succeeded, or empty().
        """
        if self._graphql is not None:
            try:
                response = self._graphql.query(query, response_type, variables)
                result = transform(response)
            except QueryError as e:
                logger.warning(
                    "GraphQL query failed, falling back to REST",
                    category=category,
                    protocol=GRAPHQL,
                    status_code=e.status_code,
                    error=str(e),
                )
            else:
                self._record(category, GRAPHQL)
                return result
        else:
            logger.debug("GraphQL client not available, using REST", category=category)

        return self._fetch_rest(
            category,
            path=path,
            decode=decode,
            empty=empty,
            params=params,
        )

    def _fetch_rest(
        self,
        category: str,
        *,
        path: str,
        decode: Callable[[Any], T],
        empty: Callable[[], T],
        params: dict[str, Any] | None = None,
    ) -> T:
        try:
            payload = self._transport.get_json(path, params=params)
            try:
                result = decode(payload)
            except pydantic.ValidationError as e:
                reason = f"{e.error_count()} validation error(s)"
                raise DecodeError(path, reason) from e
        except RequestError as e:
            logger.error(
                "REST request failed, returning empty result",
                category=category,
                protocol=REST,
                path=e.path,
                status_code=e.status_code,
                error=str(e),
            )
        except DecodeError as e:
            logger.error(
                "REST response could not be decoded, returning empty result",
                category=category,
                protocol=REST,
                path=e.path,
                error=e.reason,
            )
        else:
            self._record(category, REST)
            return result

        self._record(category, FAILED)
        return empty()

    # Cluster nodes

    def get_nodes(self) -> list[types.Node]:
        """List all cluster nodes."""
        return self._fetch_with_fallback(
            "nodes",
            query=queries.NODES,
            response_type=graph_types.NodesResponse,
            transform=transforms.nodes_from_graph,
            path="/api/internal/node",
            decode=_list_of(types.Node),
            empty=list,
        )

    def get_node_stats(
        self,
        node_id: str,
        time_range: str = DEFAULT_NODE_STATS_RANGE,
    ) -> types.NodeStats:
        """Performance statistics of one node (REST only)."""
        return self._fetch_rest(
            "node_stats",
            path=f"/api/internal/node/{_segment(node_id)}/stats",
            decode=types.NodeStats.model_validate,
            empty=types.NodeStats,
            params={"range": time_range},
        )

    # Virtual machines

    def list_vmware_vms(self) -> list[types.VirtualMachine]:
        return self._fetch_with_fallback(
            "vmware_vms",
            query=queries.VMWARE_VMS,
            response_type=graph_types.VmwareVmsResponse,
            transform=transforms.vmware_vms_from_graph,
            path="/api/v1/vmware/vm",
            decode=_tag_hypervisor(_list_of(types.VirtualMachine), transforms.VMWARE),
            empty=list,
        )

    def list_nutanix_vms(self) -> list[types.VirtualMachine]:
        return self._fetch_with_fallback(
            "nutanix_vms",
            query=queries.NUTANIX_VMS,
            response_type=graph_types.NutanixVmsResponse,
            transform=transforms.nutanix_vms_from_graph,
            path="/api/internal/nutanix/vm",
            decode=_tag_hypervisor(_list_of(types.VirtualMachine), transforms.NUTANIX),
            empty=list,
        )

    def list_hyperv_vms(self) -> list[types.VirtualMachine]:
        return self._fetch_with_fallback(
            "hyperv_vms",
            query=queries.HYPERV_VMS,
            response_type=graph_types.HypervVmsResponse,
            transform=transforms.hyperv_vms_from_graph,
            path="/api/internal/hyperv/vm",
            decode=_tag_hypervisor(_list_of(types.VirtualMachine), transforms.HYPERV),
            empty=list,
        )

    def list_all_vms(self) -> list[types.VirtualMachine]:
        """List VMs of every hypervisor family (VMware, Nutanix, Hyper-V).

        Each family degrades to empty on its own, so one unreachable family
        never hides the others.
        """
        return [
            *self.list_vmware_vms(),
            *self.list_nutanix_vms(),
            *self.list_hyperv_vms(),
        ]

    # Managed volumes and archival

    def get_managed_volumes(self) -> list[types.ManagedVolume]:
        return self._fetch_with_fallback(
            "managed_volumes",
            query=queries.MANAGED_VOLUMES,
            response_type=graph_types.ManagedVolumesResponse,
            transform=transforms.managed_volumes_from_graph,
            path="/api/internal/managed_volume",
            decode=_list_of(types.ManagedVolume),
            empty=list,
        )

    def get_archive_locations(self) -> list[types.ArchiveLocation]:
        return self._fetch_with_fallback(
            "archive_locations",
            query=queries.ARCHIVE_LOCATIONS,
            response_type=graph_types.ArchiveLocationsResponse,
            transform=transforms.archive_locations_from_graph,
            path="/api/internal/archive/location",
            decode=_list_of(types.ArchiveLocation),
            empty=list,
        )

    def get_data_location_usage(self) -> list[types.DataLocationUsage]:
        return self._fetch_with_fallback(
            "data_location_usage",
            query=queries.DATA_LOCATION_USAGE,
            response_type=graph_types.DataLocationUsageResponse,
            transform=transforms.data_location_usage_from_graph,
            path="/api/internal/stats/data_location/usage",
            decode=_list_of(types.DataLocationUsage),
            empty=list,
        )

    def get_archival_bandwidth(
        self,
        location_id: str,
        time_range: str = DEFAULT_ARCHIVAL_BANDWIDTH_RANGE,
    ) -> list[types.TimeSeriesPoint]:
        """Archival bandwidth time series for one archive location.

        Args:
            location_id: Archive location (data location) identifier.
            time_range: Relative range expression (e.g., "-1h").
        """
        time_range = time_range or DEFAULT_ARCHIVAL_BANDWIDTH_RANGE
        return self._fetch_with_fallback(
            "archival_bandwidth",
            query=queries.ARCHIVAL_BANDWIDTH_TIME_SERIES,
            response_type=graph_types.SystemResponse,
            transform=transforms.archival_bandwidth_from_graph,
            variables={"range": time_range, "locationId": location_id},
            path="/api/internal/stats/archival/bandwidth/time_series",
            params={"data_location_id": location_id, "range": time_range},
            decode=_TIME_SERIES.validate_python,
            empty=list,
        )

    # Storage

    def get_system_storage(self) -> types.SystemStorage:
        return self._fetch_with_fallback(
            "system_storage",
            query=queries.SYSTEM_STORAGE,
            response_type=graph_types.SystemResponse,
            transform=transforms.system_storage_from_graph,
            path="/api/internal/stats/system_storage",
            decode=types.SystemStorage.model_validate,
            empty=types.SystemStorage,
        )

    def get_per_vm_storage(self) -> list[types.VmStorage]:
        return self._fetch_with_fallback(
            "per_vm_storage",
            query=queries.PER_VM_STORAGE,
            response_type=graph_types.PerVmStorageResponse,
            transform=transforms.per_vm_storage_from_graph,
            path="/api/internal/stats/per_vm_storage",
            decode=_list_of(types.VmStorage),
            empty=list,
        )

    def get_stream_count(self) -> int:
        return self._fetch_with_fallback(
            "stream_count",
            query=queries.STREAMS_COUNT,
            response_type=graph_types.SystemResponse,
            transform=lambda r: r.system.streams.count,
            path="/api/internal/stats/streams/count",
            decode=lambda payload: types.StreamCount.model_validate(payload).count,
            empty=int,
        )

    def get_physical_ingest(
        self,
        time_range: str = DEFAULT_PHYSICAL_INGEST_RANGE,
    ) -> list[types.TimeSeriesPoint]:
        """Physical ingest time series over a relative range (e.g., "-10min")."""
        time_range = time_range or DEFAULT_PHYSICAL_INGEST_RANGE
        return self._fetch_with_fallback(
            "physical_ingest",
            query=queries.PHYSICAL_INGEST_TIME_SERIES,
            response_type=graph_types.SystemResponse,
            transform=transforms.physical_ingest_from_graph,
            variables={"range": time_range},
            path="/api/internal/stats/physical_ingest/time_series",
            params={"range": time_range},
            decode=_TIME_SERIES.validate_python,
            empty=list,
        )

    def get_runway_remaining(self) -> int:
        """Number of days remaining before the cluster fills up."""
        return self._fetch_with_fallback(
            "runway_remaining",
            query=queries.RUNWAY_REMAINING,
            response_type=graph_types.SystemResponse,
            transform=lambda r: r.system.runway_remaining,
            path="/api/internal/stats/runway_remaining",
            decode=lambda payload: types.RunwayRemaining.model_validate(payload).days,
            empty=int,
        )

    def get_average_storage_growth_per_day(self) -> int:
        """Average storage growth per day, in bytes."""
        return self._fetch_with_fallback(
            "average_storage_growth",
            query=queries.AVERAGE_STORAGE_GROWTH,
            response_type=graph_types.SystemResponse,
            transform=lambda r: int(r.system.average_storage_growth_per_day),
            path="/api/internal/stats/average_storage_growth_per_day",
            decode=lambda payload: types.StorageGrowth.model_validate(payload).bytes,
            empty=int,
        )

    # Reports

    def get_reports(
        self,
        report_type: str | None = None,
        report_template: str | None = None,
    ) -> list[types.Report]:
        """List reports, optionally filtered by type and template.

        The REST API filters server-side; GraphQL results are filtered here,
        case-insensitively. GraphQL often leaves the type or template unset,
        so when the filter rejects every report the REST API is asked instead.
        """
        params: dict[str, Any] = {}
        if report_type:
            params["type"] = report_type
        if report_template:
            params["report_template"] = report_template

        def _matches(value: str, wanted: str | None) -> bool:
            return not wanted or value.casefold() == wanted.casefold()

        def _transform(response: graph_types.ReportsResponse) -> list[types.Report]:
            reports = transforms.reports_from_graph(response)
            matching = [
                report
                for report in reports
                if _matches(report.report_type, report_type)
                and _matches(report.report_template, report_template)
            ]
            if reports and not matching:
                msg = f"none of {len(reports)} GraphQL reports matched the filter"
                raise QueryError(msg)
            return matching

        return self._fetch_with_fallback(
            "reports",
            query=queries.REPORTS,
            response_type=graph_types.ReportsResponse,
            transform=_transform,
            path="/api/internal/report",
            params=params,
            decode=_list_of(types.Report),
            empty=list,
        )

    def get_task_details(self) -> dict[str, float]:
        """Protection task outcome counts from the canned task report.

        Returns:
            Mapping of lower-cased outcome label to count, e.g.
            {"succeeded": 3.0, "failed": 1.0, "canceled": 2.0}. Empty when
            the report or its chart data is unavailable.
        """
        reports = self.get_reports(
            report_type=TASK_REPORT_TYPE,
            report_template=TASK_REPORT_TEMPLATE,
        )
        if not reports:
            logger.info("No task report found", report_template=TASK_REPORT_TEMPLATE)
            return {}

        charts = self._fetch_rest(
            "report_chart",
            path=f"/api/internal/report/{_segment(reports[0].id)}/chart",
            params={"chart_id": TASK_REPORT_CHART_ID},
            decode=_REPORT_CHARTS.validate_python,
            empty=list,
        )
        return transforms.reduce_job_outcomes(charts)
