"""JSON Patch (RFC 6902) operations injecting the secrets volume and init container.

Every operation is computed against the original pod spec, never against the
result of an earlier operation, so the list can be applied in one pass.
"""

from typing import Any, Dict, List

from secrets_injector.models import Container, PodSpec, Volume, VolumeMount

SECRETS_VOLUME_NAME = "secrets"
SECRETS_MOUNT_PATH = "/secrets"
INIT_CONTAINER_NAME = "secrets-injector"
INIT_CONTAINER_IMAGE = "busybox"
INIT_CONTAINER_COMMAND = ["/bin/sh", "-ec", "echo Hello >/secrets/secret.txt"]

Patch = Dict[str, Any]


def secrets_volume() -> Volume:
    return Volume(name=SECRETS_VOLUME_NAME, emptyDir={"medium": "Memory"})


def secrets_volume_mount() -> VolumeMount:
    return VolumeMount(name=SECRETS_VOLUME_NAME, mount_path=SECRETS_MOUNT_PATH)


def secrets_init_container() -> Container:
    return Container(
        name=INIT_CONTAINER_NAME,
        image=INIT_CONTAINER_IMAGE,
        command=list(INIT_CONTAINER_COMMAND),
        volume_mounts=[secrets_volume_mount()],
    )


def append_volume_mount_if_missing(mounts: List[VolumeMount], mount: VolumeMount) -> List[VolumeMount]:
    """Return ``mounts`` with ``mount`` appended unless an equal mount is already there.

    Mounts compare equal on name and mount path. The input list is not modified.
    """
    if any(existing.same_as(mount) for existing in mounts):
        return list(mounts)
    return [*mounts, mount]


def add_secrets_volume(base_path: str, spec: PodSpec, skip_existing: bool = False) -> List[Patch]:
    """Add the memory-backed ``secrets`` volume.

    An empty volume list is created with a one-element list; otherwise the
    volume is appended with the ``/-`` pointer.
    """
    if skip_existing and any(v.name == SECRETS_VOLUME_NAME for v in spec.volumes):
        return []

    volume = secrets_volume().dump()
    if spec.volumes:
        return [{"op": "add", "path": f"{base_path}/volumes/-", "value": volume}]
    return [{"op": "add", "path": f"{base_path}/volumes", "value": [volume]}]


def add_init_container(base_path: str, spec: PodSpec, skip_existing: bool = False) -> List[Patch]:
    """Put the ``secrets-injector`` init container first.

    With no init containers the list is added; otherwise the whole list is
    replaced with the injector followed by the existing entries in order.
    """
    if skip_existing and any(c.name == INIT_CONTAINER_NAME for c in spec.init_containers):
        return []

    init_containers = [secrets_init_container().dump()]
    if spec.init_containers:
        init_containers.extend(c.dump() for c in spec.init_containers)
        op = "replace"
    else:
        op = "add"
    return [{"op": op, "path": f"{base_path}/initContainers", "value": init_containers}]


def add_volume_mounts(base_path: str, spec: PodSpec) -> List[Patch]:
    """Mount ``secrets`` at ``/secrets`` in every container.

    The container list is always replaced as a whole, even when every
    container already carries the mount.
    """
    mount = secrets_volume_mount()
    containers: List[Dict[str, Any]] = []
    for container in spec.containers:
        data = container.dump()
        mounts = append_volume_mount_if_missing(container.volume_mounts, mount)
        data["volumeMounts"] = [m.dump() for m in mounts]
        containers.append(data)

    return [{"op": "replace", "path": f"{base_path}/containers", "value": containers}]


def build_patches(base_path: str, spec: PodSpec, skip_existing: bool = False) -> List[Patch]:
    """Compute all JSON Patch operations for the pod spec at ``base_path``.

    Args:
      base_path: JSON Pointer to the pod spec in the admitted object, e.g.
                 "/spec" or "/spec/template/spec".
      spec: The pod spec read from the admitted object.
      skip_existing: Leave out the volume and init container operations when
                     an entry with the injected name is already present.

    Returns:
      The volume, init container and container operations, in that order.
    """
    patches: List[Patch] = []
    patches.extend(add_secrets_volume(base_path, spec, skip_existing))
    patches.extend(add_init_container(base_path, spec, skip_existing))
    patches.extend(add_volume_mounts(base_path, spec))
    return patches
