"""Summary tab of the process workspace: environment, cgroup and PID namespace."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from cray.models import ContainerDetail
from cray.widgets import Key, KeyEvent, TextView, TreeNode, TreeView

_ENV_LIMIT = 12


@dataclass
class DetailSection:
    """A titled group of rows with a short summary."""

    title: str
    summary: str
    expanded: bool = True
    rows: list[str] = field(default_factory=list)


def _section_label(title: str, summary: str) -> str:
    return f"[aqua::b]{title}[-:-:-] [gray]({summary})[-]"


class ProcessSummaryView:
    """Shows environment, cgroup and PID namespace facts of a container."""

    def __init__(self) -> None:
        self.detail: ContainerDetail | None = None
        self._lock = threading.Lock()
        self.tree = TreeView(TreeNode("[gray]No process summary[-]", selectable=False))
        self.status_bar = TextView(
            " [yellow]Enter/Space[white]:expand  [yellow]s/g/t[white]:switch process views"
        )

    def set_detail(self, detail: ContainerDetail | None) -> None:
        """Replace the container detail and redraw."""
        with self._lock:
            self.detail = detail
        self._render()

    def refresh(self) -> None:
        """Redraw from the current detail."""
        self._render()

    def handle_input(self, event: KeyEvent | None) -> KeyEvent | None:
        """Toggle the current section on Enter or Space; return unhandled events."""
        if event is None:
            return None
        if event.key is Key.CTRL_C:
            return event
        if event.key is Key.ENTER or (event.key is Key.RUNE and event.rune == " "):
            self._toggle_current()
            return None
        return event

    def focus_primitive(self) -> TreeView:
        """Return the widget that takes focus."""
        return self.tree

    def _toggle_current(self) -> None:
        node = self.tree.current
        if node is not None and node.children:
            node.toggle()

    def _render(self) -> None:
        with self._lock:
            detail = self.detail

        if detail is None:
            root = TreeNode("[gray]Waiting for process summary data...[-]", selectable=False)
            self.tree.root = root
            self.tree.current = root
            return

        root = TreeNode("[aqua::b]Process Summary[-:-:-]", selectable=False, expanded=True)
        for section in build_process_summary_sections(detail):
            node = TreeNode(
                _section_label(section.title, section.summary),
                selectable=True,
                expanded=section.expanded,
            )
            for row in section.rows:
                node.add_child(TreeNode(f"[gray]{row}[-]", selectable=False))
            root.add_child(node)

        self.tree.root = root
        self.tree.current = root.children[0] if root.children else root


def build_process_summary_sections(detail: ContainerDetail) -> list[DetailSection]:
    """Return the environment, cgroup and PID namespace sections."""
    return [
        DetailSection(
            "Environment",
            environment_summary(detail),
            True,
            build_environment_rows(detail),
        ),
        DetailSection(
            "CGroup",
            cgroup_summary(detail),
            True,
            [
                f"Version: {_cgroup_version_label(detail)}",
                f"Path: {cgroup_path_label(detail)}",
                f"Mount Path: {cgroup_mount_path_label(detail)}",
            ],
        ),
        DetailSection(
            "PID Namespace",
            pid_namespace_summary(detail),
            True,
            build_pid_namespace_rows(detail),
        ),
    ]


def cgroup_summary(detail: ContainerDetail) -> str:
    """Return 'v<N>' for a known cgroup version, else 'unknown'."""
    return f"v{detail.cgroup_version}" if detail.cgroup_version > 0 else "unknown"


def _cgroup_version_label(detail: ContainerDetail) -> str:
    return "unknown" if detail.cgroup_version <= 0 else f"v{detail.cgroup_version}"


def cgroup_path_label(detail: ContainerDetail) -> str:
    """Return the cgroup path, falling back to the profile's relative path."""
    if detail.cgroup_path:
        return detail.cgroup_path
    profile = detail.runtime_profile
    if profile is not None and profile.cgroup is not None and profile.cgroup.relative_path:
        return profile.cgroup.relative_path
    return "unknown"


def cgroup_mount_path_label(detail: ContainerDetail) -> str:
    """Return the absolute cgroup path, or 'unknown'."""
    profile = detail.runtime_profile
    if profile is not None and profile.cgroup is not None and profile.cgroup.absolute_path:
        return profile.cgroup.absolute_path
    return "unknown"


def resolved_shared_pid(
    detail: ContainerDetail | None,
) -> tuple[bool | None, str, bool]:
    """Return (shared, pid namespace path, whether a pid namespace entry exists)."""
    if detail is None:
        return None, "", False
    namespaces = detail.namespaces or {}
    present = "pid" in namespaces
    path = namespaces.get("pid", "")
    if detail.shared_pid is not None:
        return detail.shared_pid, path, present
    if not present:
        return None, "", False
    return bool(path.strip()), path, True


def pid_namespace_summary(detail: ContainerDetail) -> str:
    """Return 'shared', 'private' or 'unknown'."""
    shared, _, present = resolved_shared_pid(detail)
    if shared is not None:
        return "shared" if shared else "private"
    return "private" if present else "unknown"


def build_pid_namespace_rows(detail: ContainerDetail) -> list[str]:
    """Return the rows describing the PID namespace."""
    shared, _, _ = resolved_shared_pid(detail)
    if shared is None:
        first = "Shared PID: unknown"
    else:
        first = f"Shared PID: {'true' if shared else 'false'}"
    rows = [first]
    if detail.process_count > 0:
        rows.append(f"Observed Processes: {detail.process_count}")
    return rows


def environment_summary(detail: ContainerDetail) -> str:
    """Return the number of environment variables, or 'unknown vars'."""
    if detail.environment:
        return f"{len(detail.environment)} vars"
    return "unknown vars"


def build_environment_rows(detail: ContainerDetail) -> list[str]:
    """Return up to twelve environment rows and a count of the rest."""
    environment = detail.environment
    if not environment:
        return ["Count: unknown", "Environment variables unavailable"]
    rows = [
        f"{'◇' if env.is_kubernetes else '-'} {env.key}: {env.value}"
        for env in environment[:_ENV_LIMIT]
    ]
    if len(environment) > _ENV_LIMIT:
        rows.append(f"... {len(environment) - _ENV_LIMIT} more")
    return rows