"""Mounts page: rootfs, CRI, runtime-default and live mounts as a tree."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from enum import Enum

from cray.models import ContainerDetail, Mount, MountOrigin, MountState, Runtime
from cray.widgets import Key, KeyEvent, TextView, TreeNode, TreeView

_TARGET_WIDTH = 28
_SOURCE_WIDTH = 44

_STATUS_TEXT = (
    " [white]Mounts:[-] rootfs, CRI mounts, runtime defaults and live extras  |  "
    "[yellow]e[white]:toggle  [yellow]a[white]:expand/collapse all"
)


def _raw(value: Enum | str) -> str:
    return value.value if isinstance(value, Enum) else value


class MountsView:
    """Groups a container's mounts and shows details of the selected one."""

    def __init__(self, runtime: Runtime | None = None) -> None:
        self.runtime = runtime
        self.container_id = ""
        self.mounts: list[Mount] = []
        self.runtime_info: ContainerDetail | None = None
        self._lock = threading.Lock()
        self.tree = TreeView(TreeNode("[gray]No mount metadata[-]", selectable=False))
        self.detail_view = TextView(title=" Mount Detail ")
        self.status_bar = TextView()
        self.render()
        self._update_status_bar()

    def set_container(self, container_id: str) -> None:
        """Switch to another container and forget loaded mounts."""
        with self._lock:
            self.container_id = container_id
            self.mounts = []
            self.runtime_info = None
        self.render()
        self._update_status_bar()

    def set_runtime_info(self, detail: ContainerDetail | None) -> None:
        """Store runtime context used to resolve the rootfs source."""
        with self._lock:
            self.runtime_info = detail
        self.render()

    def set_mounts(self, mounts: Iterable[Mount]) -> None:
        """Replace the mount list and redraw."""
        with self._lock:
            self.mounts = list(mounts)
        self.render()
        self._update_status_bar()

    def refresh(self) -> None:
        """Load mounts of the active container; runtime errors propagate."""
        with self._lock:
            container_id = self.container_id
        if not container_id.strip():
            self.render()
            return
        if self.runtime is None:
            raise RuntimeError("no runtime configured")
        self.set_mounts(self.runtime.get_container_mounts(container_id))

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

    def render(self) -> None:
        """Rebuild the tree from the current mounts."""
        with self._lock:
            mounts = list(self.mounts)
            runtime_info = self.runtime_info

        root = TreeNode("[aqua::b]Mounts[-:-:-]", selectable=False, expanded=True)
        if not mounts:
            root.add_child(
                TreeNode(
                    "[gray]Refresh to resolve rootfs, CRI mounts, runtime defaults "
                    "and live residual mounts[-]",
                    selectable=False,
                )
            )
            self.tree.root = root
            self.tree.current = root
            self._render_selection_detail(root)
            return

        root_mount, cri, runtime_mounts, others = split_mount_groups(mounts)
        if root_mount is not None:
            root.add_child(build_mount_node(root_mount, runtime_info))
        root.add_child(build_mount_group_node("CRI Mounts", cri, True, runtime_info))
        root.add_child(build_mount_group_node("Runtime Mounts", runtime_mounts, False, runtime_info))
        root.add_child(build_mount_group_node("Kernel / Other", others, False, runtime_info))

        self.tree.root = root
        current = root.children[0] if root.children else root
        self.tree.current = current
        self._render_selection_detail(current)

    def _toggle_current(self) -> None:
        node = self.tree.current
        if node is not None:
            node.toggle()
            self._render_selection_detail(node)

    def _render_selection_detail(self, node: TreeNode | None) -> None:
        if node is None:
            self.detail_view.text = (
                " [gray]Select a mount entry to inspect its source and mount command[-]"
            )
            return
        mount = node.reference if isinstance(node.reference, Mount) else None
        if mount is None:
            self.detail_view.text = " [gray]Select a concrete mount entry to open details below[-]"
            return
        detail = self.runtime_info
        self.detail_view.text = (
            f" [gray]Target:[-] [white]{fallback_value(mount.destination)}[-]\n"
            f" [gray]Source:[-] [white]{fallback_value(display_mount_source(mount, detail))}[-]\n"
            f" [gray]Type:[-] [white]{fallback_value(mount.type)}[-]"
            f"   [gray]Origin:[-] [white]{fallback_value(mount_origin_label(mount.origin))}[-]"
            f"   [gray]State:[-] [white]{fallback_value(mount_state_label(mount.state))}[-]\n"
            f" [gray]Command:[-] [white]{build_mount_command(mount, detail)}[-]"
        )

    def _expand_all(self) -> None:
        root = self.tree.root
        if root is None:
            return
        expand = not root.expanded
        for node in root.walk():
            node.expanded = expand
        root.expanded = True
        self.tree.current = root
        self._render_selection_detail(root)

    def _update_status_bar(self) -> None:
        self.status_bar.text = _STATUS_TEXT


def split_mount_groups(
    mounts: Iterable[Mount | None],
) -> tuple[Mount | None, list[Mount], list[Mount], list[Mount]]:
    """Split mounts into the root mount and sorted CRI, runtime and other groups."""
    root_mount: Mount | None = None
    cri: list[Mount] = []
    runtime_mounts: list[Mount] = []
    others: list[Mount] = []
    for mount in mounts:
        if mount is None:
            continue
        if mount.destination == "/" and root_mount is None:
            root_mount = mount
            continue
        if mount.origin == MountOrigin.CRI:
            cri.append(mount)
        elif mount.origin == MountOrigin.RUNTIME_DEFAULT:
            runtime_mounts.append(mount)
        else:
            others.append(mount)
    return (
        root_mount,
        sorted(cri, key=mount_sort_key),
        sorted(runtime_mounts, key=mount_sort_key),
        sorted(others, key=mount_sort_key),
    )


def mount_sort_key(mount: Mount | None) -> str:
    """Sort key placing /etc mounts first, then by destination and source."""
    if mount is None:
        return ""
    prefix = "0" if mount.destination.startswith("/etc") else "1"
    return f"{prefix}:{mount.destination}:{preferred_mount_source(mount)}"


def preferred_mount_source(mount: Mount | None) -> str:
    """Return the host path, else the live source, else the declared source."""
    if mount is None:
        return ""
    if mount.host_path.strip():
        return mount.host_path
    if mount.live_source.strip():
        return mount.live_source
    return mount.source


def display_mount_source(mount: Mount | None, detail: ContainerDetail | None) -> str:
    """Return the source to show, using the rootfs path for the root mount."""
    if mount is None:
        return ""
    if mount.destination == "/":
        rootfs_path = resolve_rootfs_mount_path(detail)
        if rootfs_path.strip():
            return rootfs_path
    return preferred_mount_source(mount)


def resolve_rootfs_mount_path(detail: ContainerDetail | None) -> str:
    """Return the best known rootfs location of a container, or ''."""
    if detail is None:
        return ""
    profile = detail.runtime_profile
    if profile is not None and profile.rootfs is not None:
        rootfs = profile.rootfs
        if rootfs.mount_rootfs_path.strip():
            return rootfs.mount_rootfs_path
        if rootfs.bundle_rootfs_path.strip():
            return rootfs.bundle_rootfs_path
    if detail.writable_layer_path.strip():
        return detail.writable_layer_path
    if detail.read_only_layer_path.strip():
        return detail.read_only_layer_path
    return ""


def fallback_value(value: str) -> str:
    """Return '-' for blank values."""
    return value if value.strip() else "-"


def crop_column(value: str, width: int) -> str:
    """Crop a value to ``width`` characters, ending in '...' when there is room."""
    if len(value) <= width:
        return value
    if width <= 3:
        return value[:width]
    return value[: width - 3] + "..."


def join_mount_options(options: list[str]) -> str:
    """Join options with commas, or '-' if there are none."""
    return ",".join(options) if options else "-"


def mount_origin_label(origin: MountOrigin | str) -> str:
    """Human label of a mount origin."""
    labels = {
        MountOrigin.CRI: "CRI",
        MountOrigin.RUNTIME_DEFAULT: "runtime-default",
        MountOrigin.LIVE_EXTRA: "kernel/live-extra",
    }
    for known, label in labels.items():
        if origin == known:
            return label
    return _raw(origin)


def mount_state_label(state: MountState | str) -> str:
    """Human label of a mount state."""
    labels = {
        MountState.DECLARED_LIVE: "declared + live",
        MountState.DECLARED_ONLY: "declared only",
        MountState.LIVE_ONLY: "live only",
    }
    for known, label in labels.items():
        if state == known:
            return label
    return _raw(state)


def build_mount_command(mount: Mount | None, detail: ContainerDetail | None) -> str:
    """Return an equivalent mount(8) command line."""
    if mount is None:
        return "-"
    args = ["mount"]
    if mount.type:
        args += ["-t", mount.type]
    if mount.options:
        args += ["-o", ",".join(mount.options)]
    args += [
        fallback_value(display_mount_source(mount, detail)),
        fallback_value(mount.destination),
    ]
    return " ".join(args)


def build_mount_node(mount: Mount, detail: ContainerDetail | None) -> TreeNode:
    """Build a collapsed node for one mount with its attributes as children."""
    source_text = fallback_value(display_mount_source(mount, detail))
    target = crop_column(fallback_value(mount.destination), _TARGET_WIDTH)
    source = crop_column(source_text, _SOURCE_WIDTH)
    node = TreeNode(
        f"{target:<{_TARGET_WIDTH}}  {source}", reference=mount, selectable=True, expanded=False
    )

    def row(label: str, value: str) -> None:
        node.add_child(TreeNode(f"[gray]  {label}: [white]{value}[-]", selectable=False))

    row("Type", fallback_value(mount.type))
    row("Source", source_text)
    if mount.host_path:
        row("Host Path", mount.host_path)
    if mount.live_source and mount.live_source != mount.source:
        row("Live Source", mount.live_source)
    row("Options", join_mount_options(mount.options))
    row("Origin", mount_origin_label(mount.origin))
    row("State", mount_state_label(mount.state))
    if mount.note:
        row("Note", mount.note)
    return node


def build_mount_group_node(
    title: str, mounts: list[Mount], expanded: bool, detail: ContainerDetail | None
) -> TreeNode:
    """Build a titled group node holding one node per mount."""
    node = TreeNode(
        f"[aqua::b]{title} ({len(mounts)})[-:-:-]", selectable=True, expanded=expanded
    )
    if not mounts:
        node.add_child(TreeNode("[gray]No entries[-]", selectable=False))
        return node
    for mount in mounts:
        node.add_child(build_mount_node(mount, detail))
    return node