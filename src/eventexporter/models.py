"""Data models for the event exporter."""

from datetime import datetime
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class KubeModel(BaseModel):
    """Base for models parsed from Kubernetes JSON (camelCase keys)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OwnerReference(KubeModel):
    """Reference to the owner of an object."""
    api_version: str = Field(default="", description="API version of the owner")
    kind: str = Field(default="", description="Kind of the owner")
    name: str = Field(default="", description="Name of the owner")
    uid: str = Field(default="", description="UID of the owner")
    controller: bool | None = Field(default=None, description="Whether the owner is the managing controller")
    block_owner_deletion: bool | None = Field(default=None)


class ObjectMeta(KubeModel):
    """Metadata of the Event object itself."""
    name: str = Field(default="")
    namespace: str = Field(default="")
    uid: str = Field(default="")
    resource_version: str = Field(default="")
    creation_timestamp: datetime | None = Field(default=None)
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)


class EventSource(KubeModel):
    """Component that reported the event."""
    component: str = Field(default="")
    host: str = Field(default="")


class EnhancedObjectReference(KubeModel):
    """Involved object reference, enriched with the object's labels and owners."""
    kind: str = Field(default="", description="Kind of the involved object (Pod, Node, ...)")
    namespace: str = Field(default="", description="Namespace of the involved object, empty if cluster-scoped")
    name: str = Field(default="", description="Name of the involved object")
    uid: str = Field(default="")
    api_version: str = Field(default="")
    resource_version: str = Field(default="")
    field_path: str = Field(default="")
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    owner_references: list[OwnerReference] = Field(default_factory=list)
    deleted: bool = Field(default=False, description="Whether the object was already deleted")


class EnhancedEvent(KubeModel):
    """A Kubernetes event plus the denormalized involved object.

    Sinks treat it as read-only. Template paths use the Go-style field names,
    e.g. ``.InvolvedObject.Name``, ``.ObjectMeta.Name`` or ``.UID`` (promoted
    from metadata).
    """
    template_aliases: ClassVar[dict[str, str]] = {
        "object_meta": "metadata",
        "reporting_controller": "reporting_component",
    }
    template_embedded: ClassVar[tuple[str, ...]] = ("metadata",)

    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    involved_object: EnhancedObjectReference = Field(default_factory=EnhancedObjectReference)
    reason: str = Field(default="")
    message: str = Field(default="")
    type: str = Field(default="", description="Normal or Warning")
    count: int = Field(default=0)
    first_timestamp: datetime | None = Field(default=None)
    last_timestamp: datetime | None = Field(default=None)
    event_time: datetime | None = Field(default=None)
    source: EventSource = Field(default_factory=EventSource)
    action: str = Field(default="")
    reporting_component: str = Field(default="")
    reporting_instance: str = Field(default="")
    cluster_name: str = Field(default="", description="Cluster the event was observed in")

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    def to_json(self) -> bytes:
        """Serialize the event with its Kubernetes field names."""
        return self.model_dump_json(by_alias=True).encode("utf-8")
