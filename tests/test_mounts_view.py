import pytest

from cray.models import (
    ContainerDetail,
    Mount,
    MountOrigin,
    MountState,
    RootFSInfo,
    RuntimeProfile,
)
from cray.mounts_view import (
    MountsView,
    build_mount_command,
    build_mount_group_node,
    build_mount_node,
    crop_column,
    display_mount_source,
    fallback_value,
    join_mount_options,
    mount_origin_label,
    mount_sort_key,
    mount_state_label,
    preferred_mount_source,
    resolve_rootfs_mount_path,
    split_mount_groups,
)
from cray.widgets import Key, KeyEvent

ROOTFS = "/run/containerd/io.containerd.runtime.v2.task/k8s.io/test/rootfs"


def rootfs_detail(path=ROOTFS):
    return ContainerDetail(runtime_profile=RuntimeProfile(rootfs=RootFSInfo(mount_rootfs_path=path)))


class FakeRuntime:
    def __init__(self, mounts=None, error=None):
        self.mounts = mounts or []
        self.error = error
        self.calls = []

    def get_container_runtime_info(self, container_id):
        return rootfs_detail()

    def get_container_mounts(self, container_id):
        self.calls.append(container_id)
        if self.error is not None:
            raise self.error
        return list(self.mounts)

    def get_container_processes(self, container_id):
        return []

    def get_container_top(self, container_id):
        return None

    def list_pods(self):
        return []


def sample_mounts():
    return [
        Mount(destination="/", source="overlay", type="overlay",
              origin=MountOrigin.LIVE_EXTRA, state=MountState.LIVE_ONLY),
        Mount(destination="/etc/hosts", source="tmpfs", type="tmpfs",
              origin=MountOrigin.RUNTIME_DEFAULT, state=MountState.DECLARED_LIVE),
        Mount(destination="/run", source="tmpfs", type="tmpfs",
              origin=MountOrigin.RUNTIME_DEFAULT, state=MountState.DECLARED_ONLY),
    ]


def test_toggle_group_with_e():
    view = MountsView()
    view.set_mounts(sample_mounts())

    runtime_node = view.tree.root.find("Runtime Mounts")
    assert runtime_node is not None
    assert runtime_node.expanded is False

    view.tree.current = runtime_node
    assert view.handle_input(KeyEvent(Key.RUNE, "e")) is None
    assert runtime_node.expanded is True
    assert view.detail_view.text != ""
    assert "concrete mount entry" in view.detail_view.text


def test_preferred_mount_source_prefers_host_path():
    mount = Mount(
        source="overlay",
        host_path="/var/lib/kubelet/pods/test/volumes/projected/data",
        live_source="/dev/something",
    )
    assert preferred_mount_source(mount) == "/var/lib/kubelet/pods/test/volumes/projected/data"


def test_preferred_mount_source_fallbacks():
    assert preferred_mount_source(Mount(source="s", live_source="l")) == "l"
    assert preferred_mount_source(Mount(source="s", live_source="  ")) == "s"
    assert preferred_mount_source(None) == ""


def test_display_mount_source_uses_rootfs_path_for_root_mount():
    mount = Mount(destination="/", source="overlay", host_path="/var/lib/containerd/rootfs/merged")
    detail = ContainerDetail(
        writable_layer_path="/var/lib/containerd/io.containerd.snapshotter.v1.overlayfs/snapshots/42/fs",
        runtime_profile=RuntimeProfile(rootfs=RootFSInfo(mount_rootfs_path=ROOTFS)),
    )
    assert display_mount_source(mount, detail) == ROOTFS


def test_display_mount_source_non_root_ignores_rootfs():
    mount = Mount(destination="/data", source="/host/data")
    assert display_mount_source(mount, rootfs_detail()) == "/host/data"


def test_refresh_without_container_does_not_query():
    runtime = FakeRuntime(error=OSError("boom"))
    view = MountsView(runtime)
    view.refresh()
    assert runtime.calls == []
    assert "Refresh to resolve" in view.tree.root.children[0].text


def test_refresh_propagates_runtime_error():
    view = MountsView(FakeRuntime(error=OSError("boom")))
    view.set_container("container-1")
    with pytest.raises(OSError):
        view.refresh()


def test_set_container_clears_mounts():
    view = MountsView()
    view.set_mounts(sample_mounts())
    view.set_container("other")
    assert view.mounts == []
    assert view.tree.root.find("Runtime Mounts") is None


def test_render_selects_root_mount_and_shows_detail():
    view = MountsView()
    view.set_mounts(sample_mounts())
    assert view.tree.current is view.tree.root.children[0]
    assert "[gray]Target:[-] [white]/[-]" in view.detail_view.text
    assert "mount -t overlay overlay /" in view.detail_view.text
    assert "live only" in view.detail_view.text


def test_expand_all_collapses_groups():
    view = MountsView()
    view.set_mounts(sample_mounts())
    cri = view.tree.root.find("CRI Mounts")
    assert cri.expanded is True
    assert view.handle_input(KeyEvent(Key.RUNE, "a")) is None
    assert cri.expanded is False
    assert view.tree.root.expanded is True
    assert view.tree.current is view.tree.root


def test_handle_input_passthrough():
    view = MountsView()
    ctrl_c = KeyEvent(Key.CTRL_C)
    other = KeyEvent(Key.RUNE, "x")
    assert view.handle_input(ctrl_c) is ctrl_c
    assert view.handle_input(other) is other
    assert view.handle_input(None) is None


def test_enter_toggles_current():
    view = MountsView()
    view.set_mounts(sample_mounts())
    node = view.tree.current
    assert node.expanded is False
    assert view.handle_input(KeyEvent(Key.ENTER)) is None
    assert node.expanded is True


def test_split_mount_groups_and_sorting():
    mounts = [
        Mount(destination="/run", origin=MountOrigin.RUNTIME_DEFAULT),
        Mount(destination="/", source="a"),
        None,
        Mount(destination="/dev/shm", origin=MountOrigin.RUNTIME_DEFAULT),
        Mount(destination="/etc/hosts", origin=MountOrigin.RUNTIME_DEFAULT),
        Mount(destination="/", source="b", origin=MountOrigin.CRI),
        Mount(destination="/proc", origin=MountOrigin.LIVE_EXTRA),
    ]
    root, cri, runtime_mounts, others = split_mount_groups(mounts)
    assert root.source == "a"
    assert [m.source for m in cri] == ["b"]
    assert [m.destination for m in runtime_mounts] == ["/etc/hosts", "/dev/shm", "/run"]
    assert [m.destination for m in others] == ["/proc"]


def test_mount_sort_key():
    assert mount_sort_key(Mount(destination="/etc/x", source="s")) == "0:/etc/x:s"
    assert mount_sort_key(Mount(destination="/var", host_path="/h")) == "1:/var:/h"
    assert mount_sort_key(None) == ""


def test_resolve_rootfs_mount_path_fallbacks():
    assert resolve_rootfs_mount_path(None) == ""
    bundle = ContainerDetail(runtime_profile=RuntimeProfile(rootfs=RootFSInfo(bundle_rootfs_path="/bundle")))
    assert resolve_rootfs_mount_path(bundle) == "/bundle"
    assert resolve_rootfs_mount_path(ContainerDetail(writable_layer_path="/rw", read_only_layer_path="/ro")) == "/rw"
    assert resolve_rootfs_mount_path(ContainerDetail(read_only_layer_path="/ro")) == "/ro"
    assert resolve_rootfs_mount_path(ContainerDetail()) == ""


@pytest.mark.parametrize(
    ("value", "width", "expected"),
    [("abc", 5, "abc"), ("abcdefghij", 8, "abcde..."), ("abcd", 2, "ab"), ("abcd", 3, "abc")],
)
def test_crop_column(value, width, expected):
    assert crop_column(value, width) == expected


def test_fallback_and_options():
    assert fallback_value("  ") == "-"
    assert fallback_value("x") == "x"
    assert join_mount_options([]) == "-"
    assert join_mount_options(["rw", "nosuid"]) == "rw,nosuid"


def test_labels():
    assert mount_origin_label(MountOrigin.CRI) == "CRI"
    assert mount_origin_label(MountOrigin.RUNTIME_DEFAULT) == "runtime-default"
    assert mount_origin_label(MountOrigin.LIVE_EXTRA) == "kernel/live-extra"
    assert mount_origin_label("custom") == "custom"
    assert mount_state_label(MountState.DECLARED_LIVE) == "declared + live"
    assert mount_state_label(MountState.DECLARED_ONLY) == "declared only"
    assert mount_state_label(MountState.LIVE_ONLY) == "live only"
    assert mount_state_label("") == ""


def test_build_mount_command():
    mount = Mount(destination="/data", source="/host/data", type="bind", options=["rbind", "ro"])
    assert build_mount_command(mount, None) == "mount -t bind -o rbind,ro /host/data /data"
    assert build_mount_command(Mount(destination="/x"), None) == "mount - /x"
    assert build_mount_command(None, None) == "-"
    root = Mount(destination="/", source="overlay", type="overlay")
    assert build_mount_command(root, rootfs_detail("/rootfs")) == "mount -t overlay /rootfs /"


def test_build_mount_node_children():
    mount = Mount(destination="/data", source="src", host_path="/h", live_source="/live", note="hi")
    node = build_mount_node(mount, None)
    assert node.text == "/data".ljust(28) + "  /h"
    assert node.reference is mount
    assert node.expanded is False
    text = node.texts()
    assert "Host Path: [white]/h" in text
    assert "Live Source: [white]/live" in text
    assert "Options: [white]-" in text
    assert "Note: [white]hi" in text


def test_build_mount_node_omits_same_live_source():
    node = build_mount_node(Mount(destination="/d", source="s", live_source="s"), None)
    text = node.texts()
    assert "Live Source" not in text
    assert "Host Path" not in text
    assert "Note" not in text


def test_build_mount_group_node():
    empty = build_mount_group_node("CRI Mounts", [], True, None)
    assert empty.text == "[aqua::b]CRI Mounts (0)[-:-:-]"
    assert empty.children[0].text == "[gray]No entries[-]"
    group = build_mount_group_node("Other", [Mount(destination="/a"), Mount(destination="/b")], False, None)
    assert group.expanded is False
    assert len(group.children) == 2
    assert "(2)" in group.text