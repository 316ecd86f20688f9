"""Table of pods with running-container counts."""

from __future__ import annotations

from cray.models import ContainerStatus, Pod, Runtime
from cray.widgets import Column, Table, TextView

POD_COLUMNS = [
    Column("NAME", 0),
    Column("NAMESPACE", 16),
    Column("UID", 38),
    Column("CONTAINERS", 12, "right"),
]


class PodListView:
    """Lists pods, coloured by how many of their containers run."""

    def __init__(self, runtime: Runtime) -> None:
        self.runtime = runtime
        self.pods: list[Pod] = []
        self.table = Table(POD_COLUMNS)
        self.status_bar = TextView()
        self.table.add_row("[gray]Loading pods...[-]", "", "", "")

    def refresh(self) -> None:
        """Load pods from the runtime and redraw; runtime errors propagate."""
        self.pods = list(self.runtime.list_pods())
        self._render()

    def _render(self) -> None:
        self.table.clear_data()
        for pod in self.pods:
            total = len(pod.containers)
            running = sum(1 for c in pod.containers if c.status == ContainerStatus.RUNNING)
            self.table.add_row(pod.name, pod.namespace, pod.uid[:36], f"{running}/{total}")
            row = self.table.data_row_count() - 1
            if total > 0 and running == total:
                color = "green"
            elif running > 0:
                color = "yellow"
            else:
                color = "red"
            self.table.set_row_color(row, color)
        self._update_status_bar()

    def _update_status_bar(self) -> None:
        total_containers = sum(len(pod.containers) for pod in self.pods)
        self.status_bar.text = (
            f" [white]Pods: [green]{len(self.pods)}[white] total, "
            f"{total_containers} containers  |  [yellow]r[white]:refresh"
        )