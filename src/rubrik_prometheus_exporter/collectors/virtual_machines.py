"""Virtual machine metrics collector for Rubrik.

Joins the VM inventory of every hypervisor family with the per-VM storage
statistics and generates protection and storage metrics per VM.
"""

from collections.abc import Iterator
from dataclasses import dataclass

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric

from .. import rubrikapi
from ..rubrikapi import types

# SLA domain id Rubrik assigns to VMs that are explicitly not protected
UNPROTECTED_SLA_ID = "UNPROTECTED"

STORAGE_FIELDS = (
    ("logical_bytes", "Logical size of the VM's snapshots in bytes"),
    ("ingested_bytes", "Bytes ingested for the VM"),
    ("exclusive_physical_bytes", "Physical bytes used only by the VM"),
    ("shared_physical_bytes", "Physical bytes shared with other VMs"),
    ("index_storage_bytes", "Bytes used by the VM's file index"),
)


@dataclass
class VmMetric:
    """A protected VM with its storage usage.

    Storage fields are 0.0 when the appliance reports no storage statistics
    for the VM (per-VM storage is only reported for VMware).
    """

    id: str
    name: str = ""
    hypervisor: str = ""
    sla_domain_id: str = ""
    logical_bytes: float = 0.0
    ingested_bytes: float = 0.0
    exclusive_physical_bytes: float = 0.0
    shared_physical_bytes: float = 0.0
    index_storage_bytes: float = 0.0

    @property
    def is_protected(self) -> bool:
        return self.sla_domain_id not in ("", UNPROTECTED_SLA_ID)


def _transform_vm(
    vm: types.VirtualMachine,
    storage: types.VmStorage | None,
) -> VmMetric:
    metric = VmMetric(
        id=vm.id,
        name=vm.name,
        hypervisor=vm.hypervisor,
        sla_domain_id=vm.effective_sla_domain_id,
    )
    if storage is not None:
        for field_name, _ in STORAGE_FIELDS:
            setattr(metric, field_name, getattr(storage, field_name))
    return metric


def fetch(client: rubrikapi.RubrikClient) -> list[VmMetric]:
    """Fetch VMs of all hypervisor families joined with their storage usage.

    Args:
        client: Rubrik client to use for fetching.

    Returns:
        List of VM metrics.
    """
    storage_by_id = {storage.id: storage for storage in client.get_per_vm_storage()}
    return [
        _transform_vm(vm, storage_by_id.get(vm.id)) for vm in client.list_all_vms()
    ]


def _count_by_hypervisor(vms: list[VmMetric]) -> dict[tuple[str, str], int]:
    counts: dict[tuple[str, str], int] = {}
    for vm in vms:
        key = (vm.hypervisor, "true" if vm.is_protected else "false")
        counts[key] = counts.get(key, 0) + 1
    return counts


def generate_metrics(vms: list[VmMetric]) -> Iterator[Metric]:
    """Generate Prometheus metrics from VM data.

    Args:
        vms: List of VM metrics.

    Yields:
        Prometheus Metric objects.
    """
    vm_count = GaugeMetricFamily(
        "rubrik_vm_count",
        "Number of VMs per hypervisor and protection state",
        labels=["hypervisor", "protected"],
    )
    for (hypervisor, protected), count in _count_by_hypervisor(vms).items():
        vm_count.add_metric([hypervisor, protected], count)
    yield vm_count

    vm_protected = GaugeMetricFamily(
        "rubrik_vm_protected",
        "1 if the VM has an effective SLA domain",
        labels=["vm_id", "vm_name", "hypervisor", "sla_domain_id"],
    )
    for vm in vms:
        vm_protected.add_metric(
            [vm.id, vm.name, vm.hypervisor, vm.sla_domain_id],
            int(vm.is_protected),
        )
    yield vm_protected

    for field_name, description in STORAGE_FIELDS:
        family = GaugeMetricFamily(
            f"rubrik_vm_{field_name}",
            description,
            labels=["vm_id", "vm_name"],
        )
        for vm in vms:
            family.add_metric([vm.id, vm.name], getattr(vm, field_name))
        yield family
