"""Runtime page: shim, OCI runtime and namespaces as a tree."""

from __future__ import annotations

import threading

from cray.models import ContainerDetail, Runtime
from cray.widgets import Key, KeyEvent, TextView, TreeNode, TreeView

_STATUS_TEXT = (
    " [white]Runtime:[-] shim, OCI runtime and namespace anchors  |  "
    "[yellow]e[white]:toggle  [yellow]a[white]:expand/collapse all"
)


def _row(text: str) -> TreeNode:
    return TreeNode(f"[gray]  {text}[-]", selectable=False)


class RuntimeInfoView:
    """Shows runtime metadata of the active container."""

    def __init__(self, runtime: Runtime | None = None) -> None:
        self.runtime = runtime
        self.container_id = ""
        self.detail: ContainerDetail | None = None
        self._lock = threading.Lock()
        self.tree = TreeView(TreeNode("[gray]No runtime data[-]", selectable=False))
        self.status_bar = TextView()
        self._update_status_bar()

    def set_container(self, container_id: str) -> None:
        """Switch to another container and forget loaded runtime data."""
        with self._lock:
            self.container_id = container_id
            self.detail = None
        self._render()
        self._update_status_bar()

    def refresh(self) -> None:
        """Load runtime metadata of the active container; runtime errors propagate."""
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

        root = TreeNode("[aqua::b]Runtime[-:-:-]", selectable=False, expanded=True)
        if detail is None:
            root.add_child(
                TreeNode(
                    "[gray]Refresh to resolve shim, OCI runtime and namespace metadata[-]",
                    selectable=False,
                )
            )
        else:
            root.add_child(build_runtime_shim_node(detail))
            root.add_child(build_runtime_oci_node(detail))
            root.add_child(build_runtime_namespace_node(detail))
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


def build_runtime_shim_node(detail: ContainerDetail) -> TreeNode:
    """Build the shim node with task and shim PIDs and shim metadata."""
    node = TreeNode("[yellow::b]Shim[-:-:-]", selectable=True, expanded=True)
    shim = detail.runtime_profile.shim if detail.runtime_profile is not None else None
    rows = [f"Task PID: {detail.pid}", f"Shim PID: {detail.shim_pid}"]
    if shim is not None:
        if shim.binary_path:
            rows.append("Binary: " + shim.binary_path)
        if shim.socket_address:
            rows.append("Socket: " + shim.socket_address)
        if shim.cmdline:
            rows.append("Command: " + " ".join(shim.cmdline))
        if shim.sandbox_bundle_dir:
            rows.append("Sandbox Bundle: " + shim.sandbox_bundle_dir)
    for row in rows:
        node.add_child(_row(row))
    return node


def build_runtime_oci_node(detail: ContainerDetail) -> TreeNode:
    """Build the OCI runtime node."""
    node = TreeNode("[aqua::b]OCI Runtime[-:-:-]", selectable=True, expanded=True)
    oci = detail.runtime_profile.oci if detail.runtime_profile is not None else None
    rows: list[str] = []
    if oci is not None:
        for label, value in (
            ("Runtime Name", oci.runtime_name),
            ("Runtime Binary", oci.runtime_binary),
            ("Bundle Dir", oci.bundle_dir),
            ("State Dir", oci.state_dir),
            ("Config Path", oci.config_path),
        ):
            if value:
                rows.append(f"{label}: {value}")
    if not rows:
        rows.append("OCI runtime metadata unresolved")
    for row in rows:
        node.add_child(_row(row))
    return node


def build_runtime_namespace_node(detail: ContainerDetail) -> TreeNode:
    """Build the namespace node listing namespaces sorted by name."""
    node = TreeNode("[aqua::b]Namespace[-:-:-]", selectable=True, expanded=True)
    if not detail.namespaces:
        node.add_child(_row("Namespace metadata unresolved"))
        return node
    for key in sorted(detail.namespaces):
        node.add_child(
            TreeNode(f"[gray]  {key}: [white]{detail.namespaces[key]}[-]", selectable=False)
        )
    return node