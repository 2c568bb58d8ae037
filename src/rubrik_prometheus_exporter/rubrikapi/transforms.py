"""Transformations from GraphQL response shapes to domain records.

Pure functions, one per resource category, so both protocols yield the
same types. Nested optional references (e.g., the effective SLA domain) are
flattened to their identifier; a missing reference maps to "".
"""

from . import graph_types, types

CONNECTED_STATUS = "CONNECTED"

# Hypervisor family tags for VirtualMachine.hypervisor
VMWARE = "vmware"
NUTANIX = "nutanix"
HYPERV = "hyperv"


def _sla_id(ref: graph_types.SlaDomainRef | None) -> str:
    return ref.id if ref is not None else ""


def nodes_from_graph(response: graph_types.NodesResponse) -> list[types.Node]:
    """The GraphQL ``name`` field carries what REST calls ``brikId``."""
    return [
        types.Node(
            id=node.id,
            brik_id=node.name,
            status=node.status,
            ip_address=node.ip_address,
            needs_inspection=node.needs_inspection,
        )
        for node in response.nodes
    ]


def _vms_from_connection(
    connection: graph_types.Connection[graph_types.GraphVirtualMachine],
    hypervisor: str,
) -> list[types.VirtualMachine]:
    return [
        types.VirtualMachine(
            id=vm.id,
            name=vm.name,
            effective_sla_domain_id=_sla_id(vm.effective_sla_domain),
            hypervisor=hypervisor,
        )
        for vm in connection.nodes()
    ]


def vmware_vms_from_graph(
    response: graph_types.VmwareVmsResponse,
) -> list[types.VirtualMachine]:
    return _vms_from_connection(response.vmware_vms, VMWARE)


def nutanix_vms_from_graph(
    response: graph_types.NutanixVmsResponse,
) -> list[types.VirtualMachine]:
    return _vms_from_connection(response.nutanix_vms, NUTANIX)


def hyperv_vms_from_graph(
    response: graph_types.HypervVmsResponse,
) -> list[types.VirtualMachine]:
    return _vms_from_connection(response.hyperv_vms, HYPERV)


def managed_volumes_from_graph(
    response: graph_types.ManagedVolumesResponse,
) -> list[types.ManagedVolume]:
    return [
        types.ManagedVolume(
            id=mv.id,
            name=mv.name,
            state=mv.state,
            num_channels=mv.num_channels,
            configured_sla_domain_name=mv.configured_sla_domain_name,
            configured_sla_domain_id=mv.configured_sla_domain_id,
            effective_sla_domain_id=_sla_id(mv.effective_sla_domain),
            effective_sla_domain_name=mv.effective_sla_domain_name,
            primary_cluster_id=mv.primary_cluster_id,
            used_size=mv.used_size,
            volume_size=mv.volume_size,
            sla_assignment=mv.sla_assignment,
            is_writable=mv.is_writable,
            is_relic=mv.is_relic,
            snapshot_count=mv.snapshot_count,
            pending_snapshot_count=mv.pending_snapshot_count,
        )
        for mv in response.managed_volumes.nodes()
    ]


def archive_locations_from_graph(
    response: graph_types.ArchiveLocationsResponse,
) -> list[types.ArchiveLocation]:
    """A location is active when its GraphQL status is CONNECTED."""
    return [
        types.ArchiveLocation(
            id=location.id,
            name=location.name,
            location_type=location.archival_location_type,
            is_active=location.status == CONNECTED_STATUS,
        )
        for location in response.archive_locations.nodes()
    ]


def data_location_usage_from_graph(
    response: graph_types.DataLocationUsageResponse,
) -> list[types.DataLocationUsage]:
    return [
        types.DataLocationUsage(
            location_id=usage.id,
            data_downloaded=usage.data_downloaded,
            data_archived=usage.data_archived,
            num_vms_archived=usage.num_vms_archived,
            num_filesets_archived=usage.num_filesets_archived,
            num_linux_filesets_archived=usage.num_linux_filesets_archived,
            num_windows_filesets_archived=usage.num_windows_filesets_archived,
            num_share_filesets_archived=usage.num_share_filesets_archived,
            num_mssql_dbs_archived=usage.num_mssql_dbs_archived,
            num_hyperv_vms_archived=usage.num_hyperv_vms_archived,
            num_nutanix_vms_archived=usage.num_nutanix_vms_archived,
            num_managed_volumes_archived=usage.num_managed_volumes_archived,
        )
        for usage in response.archive_locations.nodes()
    ]


def system_storage_from_graph(
    response: graph_types.SystemResponse,
) -> types.SystemStorage:
    storage = response.system.storage
    return types.SystemStorage(
        total=storage.total,
        used=storage.used,
        available=storage.available,
        snapshot=storage.snapshot,
        live_mount=storage.live_mount,
        miscellaneous=storage.miscellaneous,
    )


def per_vm_storage_from_graph(
    response: graph_types.PerVmStorageResponse,
) -> list[types.VmStorage]:
    return [
        types.VmStorage(
            id=vm.id,
            logical_bytes=vm.logical_bytes,
            ingested_bytes=vm.ingested_bytes,
            exclusive_physical_bytes=vm.exclusive_physical_bytes,
            shared_physical_bytes=vm.shared_physical_bytes,
            index_storage_bytes=vm.index_storage_bytes,
        )
        for vm in response.vmware_vms.nodes()
    ]


def _time_series(
    series: graph_types.GraphTimeSeries,
) -> list[types.TimeSeriesPoint]:
    return [
        types.TimeSeriesPoint(time=point.date, stat=point.value)
        for point in series.time_series
    ]


def physical_ingest_from_graph(
    response: graph_types.SystemResponse,
) -> list[types.TimeSeriesPoint]:
    return _time_series(response.system.physical_ingest)


def archival_bandwidth_from_graph(
    response: graph_types.SystemResponse,
) -> list[types.TimeSeriesPoint]:
    return _time_series(response.system.archival_bandwidth)


def reports_from_graph(response: graph_types.ReportsResponse) -> list[types.Report]:
    """GraphQL ``status`` maps to the REST ``updateStatus`` field."""
    return [
        types.Report(
            id=report.id,
            name=report.name,
            report_type=report.report_type,
            report_template=report.report_template,
            update_status=report.status,
        )
        for report in response.reports.nodes()
    ]


def reduce_job_outcomes(charts: list[types.ReportChart]) -> dict[str, float]:
    """Reduce report chart data to an outcome -> count mapping.

    Uses the first chart only. Each column contributes its first data point
    under its lower-cased label; columns without data points are skipped.

    Example:
        columns "Succeeded", "Failed", "Canceled" ->
        {"succeeded": 3.0, "failed": 1.0, "canceled": 2.0}
    """
    if not charts:
        return {}

    outcomes: dict[str, float] = {}
    for column in charts[0].data_columns:
        if column.data_points:
            outcomes[column.label.lower()] = column.data_points[0].value
    return outcomes
