"""Workload adapters: where each supported kind keeps its pod spec.

The patch builder only deals with a ``PodSpec`` and the JSON Pointer it lives
at. Each adapter knows how to load its kind and where that pod spec sits:

    Pod         -> /spec
    Deployment  -> /spec/template/spec
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Type

from secrets_injector.exceptions import UnsupportedWorkloadError
from secrets_injector.models import Deployment, K8sModel, Pod, PodSpec


class Workload(ABC):
    """Capability interface over one admitted workload kind."""

    kind: str = ""
    model: Type[K8sModel] = K8sModel
    spec_path: str = ""

    def load(self, raw: Any) -> K8sModel:
        """Deserialize the raw admitted object.

        Raises:
            pydantic.ValidationError: If ``raw`` does not have the shape of this kind.
        """
        return self.model.model_validate(raw)

    @abstractmethod
    def pod_spec(self, obj: K8sModel) -> PodSpec:
        """Return the pod spec held by ``obj``."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r})"


class PodWorkload(Workload):
    kind = "Pod"
    model = Pod
    spec_path = "/spec"

    def pod_spec(self, obj: Pod) -> PodSpec:
        return obj.spec


class DeploymentWorkload(Workload):
    kind = "Deployment"
    model = Deployment
    spec_path = "/spec/template/spec"

    def pod_spec(self, obj: Deployment) -> PodSpec:
        return obj.spec.template.spec


WORKLOADS: Dict[str, Workload] = {
    workload.kind: workload for workload in (PodWorkload(), DeploymentWorkload())
}


def get_workload(kind: str) -> Workload:
    """Return the adapter for ``kind``.

    Raises:
        UnsupportedWorkloadError: If no adapter handles ``kind``.
    """
    try:
        return WORKLOADS[kind]
    except KeyError:
        supported = ", ".join(sorted(WORKLOADS))
        raise UnsupportedWorkloadError(
            f"Unsupported workload kind {kind!r}, expected one of: {supported}"
        ) from None
