"""Network page: sandbox, DNS, interfaces and CNI routes as a tree."""

from __future__ import annotations

import threading
from collections.abc import Iterable

from cray.models import (
    CNIResultInfo,
    ContainerDetail,
    DNSConfig,
    PodNetworkInfo,
    Runtime,
)
from cray.mounts_view import fallback_value
from cray.widgets import Key, KeyEvent, TextView, TreeNode, TreeView

_STATUS_TEXT = (
    " [white]Network:[-] sandbox, DNS, CNI interfaces and routes  |  "
    "[yellow]e[white]:toggle  [yellow]a[white]:expand/collapse all"
)


def _row(text: str) -> TreeNode:
    return TreeNode(f"[gray]  {text}[-]", selectable=False)


class NetworkInfoView:
    """Shows the pod network facts of the active container."""

    def __init__(self, runtime: Runtime | None = None) -> None:
        self.runtime = runtime
        self.container_id = ""
        self.detail: ContainerDetail | None = None
        self._lock = threading.Lock()
        self.tree = TreeView(TreeNode("[gray]No network data[-]", selectable=False))
        self.status_bar = TextView()
        self._update_status_bar()

    def set_container(self, container_id: str) -> None:
        """Switch to another container and forget loaded network data."""
        with self._lock:
            self.container_id = container_id
            self.detail = None
        self._render()
        self._update_status_bar()

    def refresh(self) -> None:
        """Load network metadata of the active container; runtime errors propagate."""
        with self._lock:
            container_id = self.container_id
        if not container_id.strip():
            self._render()
            return
        if self.runtime is None:
            raise RuntimeError("no runtime configured")
        detail = self.runtime.get_container_runtime_info(container_id)
        with self._lock:
            self.detail = detail
        self._render()
        self._update_status_bar()

    def handle_input(self, event: KeyEvent | None) -> KeyEvent | None:
        """Toggle or expand tree nodes; return the event if not consumed."""
        if event is None:
            return None
        if event.key is Key.CTRL_C:
            return event
        if event.key is Key.ENTER:
            self._toggle_current()
            return None
        if event.key is Key.RUNE:
            if event.rune in ("e", "E"):
                self._toggle_current()
                return None
            if event.rune in ("a", "A"):
                self._expand_all()
                return None
        return event

    def focus_primitive(self) -> TreeView:
        """Return the widget that takes focus."""
        return self.tree

    def _toggle_current(self) -> None:
        if self.tree.current is not None:
            self.tree.current.toggle()

    def _render(self) -> None:
        with self._lock:
            detail = self.detail

        root = TreeNode("[aqua::b]Network[-:-:-]", selectable=False, expanded=True)
        if detail is None or detail.pod_network is None:
            root.add_child(
                TreeNode(
                    "[gray]Refresh to resolve sandbox, DNS, interfaces and CNI routes[-]",
                    selectable=False,
                )
            )
            self.tree.root = root
            self.tree.current = root
            return

        network = detail.pod_network
        root.add_child(build_network_sandbox_node(network))
        root.add_child(build_network_dns_node("Sandbox DNS", network.dns, True))
        root.add_child(build_network_interfaces_node(network))
        root.add_child(build_network_routes_node(network.cni))
        root.add_child(build_network_dns_node("CNI DNS", cni_dns(network.cni), False))
        self.tree.root = root
        self.tree.current = root

    def _expand_all(self) -> None:
        root = self.tree.root
        if root is None:
            return
        expand = not root.expanded
        for node in root.walk():
            node.expanded = expand
        root.expanded = True
        self.tree.current = root

    def _update_status_bar(self) -> None:
        self.status_bar.text = _STATUS_TEXT


def build_network_sandbox_node(network: PodNetworkInfo) -> TreeNode:
    """Build the sandbox node with identity, ports and warnings."""
    node = TreeNode("[yellow::b]Sandbox[-:-:-]", selectable=True, expanded=True)
    rows = [
        "Sandbox ID: " + fallback_value(network.sandbox_id),
        "State: " + fallback_value(network.sandbox_state),
        "Primary IP: " + fallback_value(network.primary_ip),
        "Additional IPs: " + ", ".join(non_empty_or_dash(network.additional_ips)),
        "Host Network: " + ("true" if network.host_network else "false"),
        "Namespace Mode: " + fallback_value(network.namespace_mode),
        "NetNS Path: " + fallback_value(network.netns_path),
        "Hostname: " + fallback_value(network.hostname),
        "Runtime Handler: " + fallback_value(network.runtime_handler),
        "Runtime Type: " + fallback_value(network.runtime_type),
    ]
    for row in rows:
        node.add_child(_row(row))

    if network.port_mappings:
        ports = TreeNode(
            f"[aqua::b]  Port Mappings ({len(network.port_mappings)})[-:-:-]",
            selectable=True,
            expanded=False,
        )
        for port in network.port_mappings:
            ports.add_child(
                TreeNode(
                    f"[gray]    {fallback_value(port.host_ip)}:{port.host_port} -> "
                    f"{port.container_port}/{port.protocol.lower()}[-]",
                    selectable=False,
                )
            )
        node.add_child(ports)

    if network.warnings:
        warnings = TreeNode(
            f"[yellow::b]  Warnings ({len(network.warnings)})[-:-:-]",
            selectable=True,
            expanded=False,
        )
        for warning in network.warnings:
            warnings.add_child(TreeNode(f"[gray]    {warning}[-]", selectable=False))
        node.add_child(warnings)
    return node


def build_network_dns_node(title: str, dns: DNSConfig | None, expanded: bool) -> TreeNode:
    """Build a titled node listing a DNS configuration."""
    node = TreeNode(f"[aqua::b]{title}[-:-:-]", selectable=True, expanded=expanded)
    if dns is None:
        node.add_child(_row("No DNS data"))
        return node
    rows = [
        "Domain: " + fallback_value(dns.domain),
        "Servers: " + ", ".join(non_empty_or_dash(dns.servers)),
        "Searches: " + ", ".join(non_empty_or_dash(dns.searches)),
        "Options: " + ", ".join(non_empty_or_dash(dns.options)),
    ]
    for row in rows:
        node.add_child(_row(row))
    return node


def build_network_interfaces_node(network: PodNetworkInfo | None) -> TreeNode:
    """Build the interfaces node from CNI data, else from observed counters."""
    cni_count = len(network.cni.interfaces) if network is not None and network.cni else 0
    observed_count = len(network.observed_interfaces) if network is not None else 0
    count = cni_count or observed_count
    node = TreeNode(f"[aqua::b]Interfaces ({count})[-:-:-]", selectable=True, expanded=True)
    if network is None:
        node.add_child(_row("No interface data"))
        return node

    def detail(parent: TreeNode, label: str, value: str) -> None:
        parent.add_child(TreeNode(f"[gray]  {label}: [white]{value}[-]", selectable=False))

    if network.cni is not None and network.cni.interfaces:
        for iface in sorted(network.cni.interfaces, key=lambda i: i.name):
            iface_node = TreeNode(iface.name, selectable=True, expanded=False)
            detail(iface_node, "Source", "cni")
            detail(iface_node, "MAC", fallback_value(iface.mac))
            detail(iface_node, "Sandbox", fallback_value(iface.sandbox))
            detail(iface_node, "PCI", fallback_value(iface.pci_id))
            detail(iface_node, "Socket", fallback_value(iface.socket_path))
            if not iface.addresses:
                detail(iface_node, "Addresses", "-")
            for address in iface.addresses:
                iface_node.add_child(
                    TreeNode(
                        f"[gray]  Address: [white]{fallback_value(address.cidr)}[-]  "
                        f"[gray]Gateway:[-] [white]{fallback_value(address.gateway)}[-]  "
                        f"[gray]Family:[-] [white]{fallback_value(address.family)}[-]",
                        selectable=False,
                    )
                )
            node.add_child(iface_node)
        return node

    if not network.observed_interfaces:
        node.add_child(_row("No interface data"))
        return node

    for stats in sorted(network.observed_interfaces, key=lambda s: s.interface):
        iface_node = TreeNode(stats.interface, selectable=True, expanded=False)
        detail(iface_node, "Source", "procfs")
        detail(iface_node, "RX", f"{stats.rx_bytes} bytes / {stats.rx_packets} packets")
        detail(iface_node, "TX", f"{stats.tx_bytes} bytes / {stats.tx_packets} packets")
        detail(iface_node, "Errors", f"rx={stats.rx_errors} tx={stats.tx_errors}")
        node.add_child(iface_node)
    return node


def build_network_routes_node(cni: CNIResultInfo | None) -> TreeNode:
    """Build the collapsed node listing CNI routes."""
    count = len(cni.routes) if cni is not None else 0
    node = TreeNode(f"[aqua::b]CNI Routes ({count})[-:-:-]", selectable=True, expanded=False)
    if cni is None or not cni.routes:
        node.add_child(_row("No CNI route data"))
        return node
    for route in cni.routes:
        node.add_child(
            _row(f"{fallback_value(route.destination)} -> {fallback_value(route.gateway)}")
        )
    return node


def cni_dns(cni: CNIResultInfo | None) -> DNSConfig | None:
    """Return the DNS part of a CNI result, if any."""
    return cni.dns if cni is not None else None


def non_empty_or_dash(values: Iterable[str]) -> list[str]:
    """Replace blank items with '-', and an empty list with ['-']."""
    items = [fallback_value(value) for value in values]
    return items or ["-"]