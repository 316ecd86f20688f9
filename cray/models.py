"""Data model for containers, pods, processes, mounts and networking."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Protocol, runtime_checkable


class MountOrigin(str, Enum):
    """Where a mount entry was declared."""

    CRI = "cri"
    RUNTIME_DEFAULT = "runtime-default"
    LIVE_EXTRA = "live-extra"


class MountState(str, Enum):
    """Whether a mount was declared, observed live, or both."""

    DECLARED_LIVE = "declared-live"
    DECLARED_ONLY = "declared-only"
    LIVE_ONLY = "live-only"


class ContainerStatus(str, Enum):
    """Lifecycle state of a container."""

    CREATED = "created"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"
    UNKNOWN = "unknown"


@dataclass
class Mount:
    """One mount of a container's filesystem view."""

    destination: str = ""
    source: str = ""
    type: str = ""
    options: list[str] = field(default_factory=list)
    host_path: str = ""
    live_source: str = ""
    origin: MountOrigin | str = ""
    state: MountState | str = ""
    note: str = ""


@dataclass
class RootFSInfo:
    """Locations of a container's root filesystem."""

    mount_rootfs_path: str = ""
    bundle_rootfs_path: str = ""


@dataclass
class ShimInfo:
    """Details of the runtime shim serving a container."""

    binary_path: str = ""
    socket_address: str = ""
    cmdline: list[str] = field(default_factory=list)
    bundle_dir: str = ""
    sandbox_bundle_dir: str = ""


@dataclass
class OCIInfo:
    """Details of the OCI runtime running a container."""

    runtime_name: str = ""
    runtime_binary: str = ""
    bundle_dir: str = ""
    state_dir: str = ""
    config_path: str = ""


@dataclass
class CGroupInfo:
    """Relative and absolute cgroup locations."""

    relative_path: str = ""
    absolute_path: str = ""


@dataclass
class RuntimeProfile:
    """Runtime-side facts gathered about a container."""

    shim: ShimInfo | None = None
    oci: OCIInfo | None = None
    rootfs: RootFSInfo | None = None
    cgroup: CGroupInfo | None = None


@dataclass
class EnvVar:
    """One environment variable of a container process."""

    key: str = ""
    value: str = ""
    is_kubernetes: bool = False


@dataclass
class Container:
    """Basic container record."""

    id: str = ""
    name: str = ""
    image: str = ""
    status: ContainerStatus = ContainerStatus.UNKNOWN
    pid: int = 0
    namespace: str = ""
    pod_name: str = ""
    labels: dict[str, str] = field(default_factory=dict)


@dataclass
class NetworkStats:
    """Counters of one network interface."""

    interface: str = ""
    rx_bytes: int = 0
    tx_bytes: int = 0
    rx_packets: int = 0
    tx_packets: int = 0
    rx_errors: int = 0
    tx_errors: int = 0
    rx_bytes_per_sec: float = 0.0
    tx_bytes_per_sec: float = 0.0


@dataclass
class DNSConfig:
    """DNS settings of a sandbox or CNI result."""

    domain: str = ""
    servers: list[str] = field(default_factory=list)
    searches: list[str] = field(default_factory=list)
    options: list[str] = field(default_factory=list)


@dataclass
class CNIAddress:
    """An address assigned by a CNI plugin."""

    cidr: str = ""
    gateway: str = ""
    family: str = ""


@dataclass
class CNIInterface:
    """An interface reported by a CNI plugin."""

    name: str = ""
    mac: str = ""
    sandbox: str = ""
    pci_id: str = ""
    socket_path: str = ""
    addresses: list[CNIAddress] = field(default_factory=list)


@dataclass
class CNIRoute:
    """A route reported by a CNI plugin."""

    destination: str = ""
    gateway: str = ""


@dataclass
class CNIResultInfo:
    """The result of CNI network setup."""

    interfaces: list[CNIInterface] = field(default_factory=list)
    routes: list[CNIRoute] = field(default_factory=list)
    dns: DNSConfig | None = None


@dataclass
class PortMapping:
    """A host-to-container port mapping."""

    protocol: str = ""
    container_port: int = 0
    host_port: int = 0
    host_ip: str = ""


@dataclass
class PodNetworkInfo:
    """Network facts of a pod sandbox."""

    sandbox_id: str = ""
    sandbox_state: str = ""
    primary_ip: str = ""
    additional_ips: list[str] = field(default_factory=list)
    host_network: bool = False
    namespace_mode: str = ""
    netns_path: str = ""
    hostname: str = ""
    runtime_handler: str = ""
    runtime_type: str = ""
    port_mappings: list[PortMapping] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    dns: DNSConfig | None = None
    cni: CNIResultInfo | None = None
    observed_interfaces: list[NetworkStats] = field(default_factory=list)


@dataclass
class ContainerDetail:
    """Everything known about one container."""

    container: Container = field(default_factory=Container)
    image_name: str = ""
    shim_pid: int = 0
    runtime_profile: RuntimeProfile | None = None
    writable_layer_path: str = ""
    read_only_layer_path: str = ""
    cgroup_version: int = 0
    cgroup_path: str = ""
    shared_pid: bool | None = None
    namespaces: dict[str, str] = field(default_factory=dict)
    environment: list[EnvVar] = field(default_factory=list)
    process_count: int = 0
    pod_network: PodNetworkInfo | None = None

    @property
    def id(self) -> str:
        return self.container.id

    @property
    def name(self) -> str:
        return self.container.name

    @property
    def image(self) -> str:
        return self.container.image

    @property
    def status(self) -> ContainerStatus:
        return self.container.status

    @property
    def pid(self) -> int:
        return self.container.pid


@dataclass
class Process:
    """A process inside a container, with resource figures."""

    pid: int = 0
    ppid: int = 0
    state: str = ""
    command: str = ""
    args: list[str] = field(default_factory=list)
    children: list[Process] = field(default_factory=list)
    cpu_percent: float = 0.0
    memory_percent: float = 0.0
    memory_rss: int = 0
    read_bytes: int = 0
    write_bytes: int = 0
    read_bytes_per_sec: float = 0.0
    write_bytes_per_sec: float = 0.0


@dataclass
class ProcessTop:
    """A top-style sample of a container's processes."""

    processes: list[Process] = field(default_factory=list)
    network_io: list[NetworkStats] = field(default_factory=list)
    timestamp: datetime | None = None
    cpu_cores: float = 0.0
    memory_limit: int = 0


@dataclass
class Pod:
    """A pod and the containers it holds."""

    name: str = ""
    namespace: str = ""
    uid: str = ""
    containers: list[Container] = field(default_factory=list)


@runtime_checkable
class Runtime(Protocol):
    """The container runtime queries the views rely on; failures raise."""

    def get_container_runtime_info(self, container_id: str) -> ContainerDetail:
        """Return runtime, namespace and network facts of a container."""
        ...

    def get_container_mounts(self, container_id: str) -> list[Mount]:
        """Return the mounts of a container."""
        ...

    def get_container_processes(self, container_id: str) -> list[Process]:
        """Return the processes of a container."""
        ...

    def get_container_top(self, container_id: str) -> ProcessTop:
        """Return a top-style sample of a container."""
        ...

    def list_pods(self) -> list[Pod]:
        """Return all pods."""
        ...