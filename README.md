# cray

`cray` holds the views of a container inspector. Each view turns what a
container runtime reports into plain in-memory trees, tables and
status-line text. The text carries colour markup tags such as
`[gray]...[-]`.

The package has no dependencies outside the standard library. It does not
talk to a container runtime itself. You supply an object that follows the
`cray.models.Runtime` protocol, and the views call its methods:

- `get_container_runtime_info(container_id)`
- `get_container_mounts(container_id)`
- `get_container_processes(container_id)`
- `get_container_top(container_id)`
- `list_pods()`

Errors that these methods raise pass through each view's `refresh()`.
Some views are built without a runtime (`runtime=None`). Calling
`refresh()` on one of them after a container has been set raises
`RuntimeError`.

## Installation

```
pip install .
```

To install the test requirements as well:

```
pip install ".[test]"
```

## Views

| Module | View | Shows |
| --- | --- | --- |
| `cray.mounts_view` | `MountsView` | The root mount first, then the CRI mounts, runtime-default mounts and kernel/other mounts, each group sorted with `/etc` mounts first. The selected mount gets a detail panel with the equivalent `mount` command (`build_mount_command`). |
| `cray.network_view` | `NetworkInfoView` | The sandbox (with port mappings and warnings), sandbox DNS, interfaces, CNI routes and CNI DNS. Interfaces come from CNI data when there is any, and from observed procfs counters otherwise. |
| `cray.runtime_info` | `RuntimeInfoView` | The shim, the OCI runtime, and the namespace paths sorted by name. |
| `cray.process_summary` | `ProcessSummaryView` | Environment (at most 12 variables), cgroup version and paths, and whether the PID namespace is shared. |
| `cray.process_tree` | `ProcessTreeView` | Processes as a tree under a shim root node. Sibling processes that run the same command are collected under one collapsed node. |
| `cray.top_view` | `TopView` | A top-like table sorted by CPU, memory, PID or I/O (`SortField`), plus a bar with limits and network rates. `start_auto_refresh()` refreshes it from a background thread, every 2 seconds by default. |
| `cray.processes_view` | `ProcessesView` | The summary, tree and top views behind a tab bar (`ProcessTab`). |
| `cray.pod_list` | `PodListView` | One table row per pod, showing running/total containers. A row is coloured green when all its containers run, yellow when some do, and red otherwise. |
| `cray.placeholder_view` | `PlaceholderView` | A reserved page with a title, a description and a hint. |

The data classes are in `cray.models`: `Mount`, `ContainerDetail`,
`Process`, `ProcessTop`, `PodNetworkInfo`, `Pod` and others.

The building blocks the views draw into are in `cray.widgets`: `TreeNode`,
`TreeView`, `TextView`, `Table`, `Column`, `Key` and `KeyEvent`. A
`TreeNode` has `walk()`, `texts()` and `find(target)`. `find(target)`
matches node text with the colour tags removed.

## Keys

Pass a `KeyEvent` to a view's `handle_input(event)`. The method returns
`None` when the view used the key. Otherwise it returns the event, so
that the caller can pass it on. Ctrl+C is always passed on.

| View | Key | Action |
| --- | --- | --- |
| Mounts, network, runtime, process tree | Enter, `e` | Toggle the current node. |
| Mounts, network, runtime, process tree | `a` | Expand or collapse all nodes. |
| Process summary | Enter, Space | Toggle the current section. |
| Top | `c`, `m`, `p`, `i` | Sort by CPU, memory, PID or I/O. |
| Processes | `s`, `g`, `t` | Switch to the summary, tree or top tab. |
| Processes | `[`, `]` | Switch to the previous or next tab. |

## Example

```python
from cray.models import Mount, MountOrigin, MountState
from cray.mounts_view import MountsView

view = MountsView(runtime=None)
view.set_mounts([
    Mount(destination="/", source="overlay", type="overlay",
          origin=MountOrigin.LIVE_EXTRA, state=MountState.LIVE_ONLY),
    Mount(destination="/etc/hosts", source="tmpfs", type="tmpfs",
          origin=MountOrigin.RUNTIME_DEFAULT, state=MountState.DECLARED_LIVE),
])
print(view.focus_primitive().root.texts())
print(view.detail_view.text)
```

## What this package does not do

- It draws nothing on a terminal. There is no screen, no event loop and no
  command to run. A front end has to render the widgets and send key
  events to the views itself.
- It has no runtime client. Data about containers, mounts, processes and
  pods comes only from the `Runtime` object you supply.
- It has no view of image layers or the container filesystem, and no
  container list or container detail page. It provides only the views
  listed above.

## Tests

```
pytest
```