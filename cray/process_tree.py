"""Process tree tab: container processes under their runtime shim."""

from __future__ import annotations

import threading
from collections.abc import Iterable

from cray.models import ContainerDetail, Process, Runtime
from cray.mounts_view import crop_column
from cray.widgets import Key, KeyEvent, TextView, TreeNode, TreeView

_SUMMARY_WIDTH = 72

_STATE_COLORS = {
    "S": "green",
    "R": "aqua",
    "D": "yellow",
    "Z": "red",
    "T": "gray",
}


def _base(path: str) -> str:
    """Return the last element of a slash-separated path."""
    if not path:
        return "."
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    return stripped.rsplit("/", 1)[-1]


class ProcessTreeView:
    """Shows a container's processes as a tree rooted at the shim."""

    def __init__(self, runtime: Runtime | None = None) -> None:
        self.runtime = runtime
        self.container_id = ""
        self.processes: list[Process] = []
        self.detail: ContainerDetail | None = None
        self._lock = threading.Lock()
        self.tree = TreeView(TreeNode("[gray]No data[-]"))
        self.status_bar = TextView()
        self._update_status_bar()

    def set_container(self, container_id: str) -> None:
        """Set the container whose processes are shown."""
        with self._lock:
            self.container_id = container_id

    def set_detail(self, detail: ContainerDetail | None) -> None:
        """Set the container detail used for the shim label."""
        with self._lock:
            self.detail = detail

    def refresh(self) -> None:
        """Load processes of the active container and redraw; runtime errors propagate."""
        with self._lock:
            container_id = self.container_id
        if not container_id:
            return
        if self.runtime is None:
            raise RuntimeError("no runtime configured")
        processes = list(self.runtime.get_container_processes(container_id))
        with self._lock:
            self.processes = processes
        self._render()

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

    def process_count(self) -> int:
        """Return the number of loaded processes."""
        with self._lock:
            return len(self.processes)

    def _render(self) -> None:
        with self._lock:
            processes = list(self.processes)
            detail = self.detail

        pids = {process.pid for process in processes}
        roots = sorted(
            (process for process in processes if process.ppid not in pids),
            key=lambda process: process.pid,
        )

        root_node = TreeNode(process_tree_root_label(detail), selectable=True, expanded=True)
        for process in roots:
            root_node.add_child(_build_process_node(process))
        self.tree.root = root_node
        self.tree.current = root_node
        self._update_status_bar()

    def _toggle_current(self) -> None:
        if self.tree.current is not None:
            self.tree.current.toggle()

    def _expand_all(self) -> None:
        root = self.tree.root
        if root is None:
            return
        all_expanded = not any(
            node.children and not node.expanded for node in root.walk()
        )
        target = not all_expanded
        for node in root.walk():
            node.expanded = target

    def _update_status_bar(self) -> None:
        self.status_bar.text = (
            f" [white]Tree: [green]{self.process_count()}[white]  |  "
            "[aqua]root[-]: shim -> container process tree  |  "
            "[yellow]e[white]:toggle expand  [yellow]a[white]:expand/collapse all"
        )


def _build_process_node(process: Process) -> TreeNode:
    color = _STATE_COLORS.get(process.state, "white")
    label = (
        f"[white::b]{process_display_name(process)}[-:-:-] "
        f"[gray][pid:{process.pid}][-] [{color}]({process.state})[-] "
        f"{process_command_summary(process)}"
    )
    node = TreeNode(label, reference=process, selectable=True, expanded=True)
    if process.children:
        children = sorted(process.children, key=lambda child: child.pid)
        for child_node in _build_child_nodes(children):
            node.add_child(child_node)
    return node


def _build_child_nodes(children: Iterable[Process]) -> list[TreeNode]:
    groups: dict[str, list[Process]] = {}
    for child in children:
        groups.setdefault(process_group_key(child), []).append(child)

    nodes: list[TreeNode] = []
    for group in groups.values():
        if len(group) == 1:
            nodes.append(_build_process_node(group[0]))
            continue
        aggregate = TreeNode(
            f"[aqua]{len(group)} ×[-] {process_command_summary(group[0])} "
            "[gray][same command][-]",
            selectable=True,
            expanded=False,
        )
        for child in group:
            aggregate.add_child(_build_process_node(child))
        nodes.append(aggregate)
    return nodes


def process_tree_root_label(detail: ContainerDetail | None) -> str:
    """Label of the tree root naming the shim binary and its PID when known."""
    shim_name = "containerd-shim"
    shim_pid = 0
    if detail is not None:
        shim_pid = detail.shim_pid
        profile = detail.runtime_profile
        if profile is not None and profile.shim is not None and profile.shim.binary_path:
            shim_name = _base(profile.shim.binary_path)
    if shim_pid > 0:
        return (
            f"[aqua::b]Shim[-:-:-] [gray]({shim_name}, not in container)[-] "
            f"[white][pid:{shim_pid}][-]"
        )
    return f"[aqua::b]Shim[-:-:-] [gray]({shim_name}, not in container)[-]"


def process_display_name(process: Process) -> str:
    """Base name of the command, else of the first argument, else 'pid-<N>'."""
    if process.command:
        return _base(process.command)
    if process.args:
        return _base(process.args[0])
    return f"pid-{process.pid}"


def process_command_summary(process: Process) -> str:
    """Command and arguments on one line, cropped to a card width."""
    parts: list[str] = []
    if process.command:
        parts.append(process.command)
    if process.args:
        parts.append(" ".join(process.args))
    command = " ".join(parts).strip()
    if not command:
        command = process_display_name(process)
    return crop_column(command, _SUMMARY_WIDTH)


def process_group_key(process: Process) -> str:
    """Key under which sibling processes running the same command are grouped."""
    return process_display_name(process) + "\x00" + process_command_summary(process)