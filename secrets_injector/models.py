"""Pydantic models for the parts of Pod and Deployment objects the injector reads.

Only the fields the patch builder looks at are declared. Everything else is
kept as model extras, so dumping a model with ``dump()`` gives back the
fields it was admitted with and nothing more.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class K8sModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def dump(self) -> Dict[str, Any]:
        """Serialize back to the Kubernetes wire shape (camelCase, only set fields)."""
        data = self.model_dump(by_alias=True, exclude_unset=True)
        data.update(self.model_extra or {})
        return data


def null_as_empty_list(value: Any) -> Any:
    # the API server may send `null` for an empty list
    return [] if value is None else value


def null_as_empty_object(value: Any) -> Any:
    return {} if value is None else value


class VolumeMount(K8sModel):
    name: str
    mount_path: str = Field(alias="mountPath")

    def same_as(self, other: "VolumeMount") -> bool:
        return self.name == other.name and self.mount_path == other.mount_path


class Volume(K8sModel):
    name: str


class Container(K8sModel):
    name: Optional[str] = None
    image: Optional[str] = None
    volume_mounts: List[VolumeMount] = Field(default_factory=list, alias="volumeMounts")

    @field_validator("volume_mounts", mode="before")
    @classmethod
    def volume_mounts_null(cls, value: Any) -> Any:
        return null_as_empty_list(value)


class PodSpec(K8sModel):
    volumes: List[Volume] = Field(default_factory=list)
    containers: List[Container] = Field(default_factory=list)
    init_containers: List[Container] = Field(default_factory=list, alias="initContainers")

    @field_validator("volumes", "containers", "init_containers", mode="before")
    @classmethod
    def lists_null(cls, value: Any) -> Any:
        return null_as_empty_list(value)


class Pod(K8sModel):
    spec: PodSpec = Field(default_factory=PodSpec)

    @field_validator("spec", mode="before")
    @classmethod
    def spec_null(cls, value: Any) -> Any:
        return null_as_empty_object(value)


class PodTemplateSpec(K8sModel):
    spec: PodSpec = Field(default_factory=PodSpec)

    @field_validator("spec", mode="before")
    @classmethod
    def spec_null(cls, value: Any) -> Any:
        return null_as_empty_object(value)


class DeploymentSpec(K8sModel):
    template: PodTemplateSpec = Field(default_factory=PodTemplateSpec)

    @field_validator("template", mode="before")
    @classmethod
    def template_null(cls, value: Any) -> Any:
        return null_as_empty_object(value)


class Deployment(K8sModel):
    spec: DeploymentSpec = Field(default_factory=DeploymentSpec)

    @field_validator("spec", mode="before")
    @classmethod
    def spec_null(cls, value: Any) -> Any:
        return null_as_empty_object(value)
