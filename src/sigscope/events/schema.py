"""
Instrumentation event schema.

Events arrive as JSON-shaped records from the runtime bridge:

    {"type": "signal:write", "originId": "ctx-1", "timestamp": 12.5,
     "data": {"signalId": "count", "name": "count", "value": 3}}

Each record is decoded into one variant of a tagged union keyed on
``type``. Wire keys are camelCase; attributes are snake_case.
"""

import logging
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from ..core.inference import infer_node_type
from ..core.result import Err, Ok, Result
from ..core.types import EventCategory, NodeType, SourceLocation

logger = logging.getLogger(__name__)


class WireModel(BaseModel):
    """Base for records read off the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


def _lenient_location(value: Any) -> Any:
    # A location without a file is useless for attribution; treat it as absent.
    if isinstance(value, dict) and value.get("file"):
        return value
    if isinstance(value, SourceLocation):
        return value
    return None


class NodeEventData(WireModel):
    name: Optional[str] = None
    source_location: Optional[SourceLocation] = None

    @field_validator("source_location", mode="before")
    @classmethod
    def _check_location(cls, value: Any) -> Any:
        return _lenient_location(value)


class SignalData(NodeEventData):
    signal_id: str = Field(min_length=1)


class ComputedData(NodeEventData):
    computed_id: str = Field(min_length=1)


class EffectData(NodeEventData):
    effect_id: str = Field(min_length=1)


class SubscribeData(NodeEventData):
    subscribe_id: str = Field(min_length=1)


class DependencyData(WireModel):
    producer_id: str = Field(min_length=1)
    consumer_id: str = Field(min_length=1)


_SNAPSHOT_TYPES = {
    "signal": NodeType.SIGNAL,
    "computed": NodeType.DERIVED,
    "derived": NodeType.DERIVED,
    "effect": NodeType.EFFECT,
    "subscribe": NodeType.SUBSCRIBE,
}


class SnapshotNode(WireModel):
    id: str = Field(min_length=1)
    type: NodeType
    name: Optional[str] = None
    source_location: Optional[SourceLocation] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        raw_type = data.get("type")
        node_id = data.get("id")
        # Non-string values are left for field validation to reject.
        if isinstance(raw_type, str) and raw_type in _SNAPSHOT_TYPES:
            data["type"] = _SNAPSHOT_TYPES[raw_type]
        elif isinstance(node_id, str) and (raw_type is None or isinstance(raw_type, str)):
            data["type"] = infer_node_type(node_id)
        data["sourceLocation"] = _lenient_location(
            data.pop("sourceLocation", data.pop("source_location", None))
        )
        return data


class SnapshotEdge(WireModel):
    producer_id: str = Field(min_length=1)
    consumer_id: str = Field(min_length=1)


def _keep_valid(items: Any, model: type[BaseModel]) -> List[Any]:
    if not isinstance(items, list):
        return []
    kept = []
    for item in items:
        try:
            kept.append(model.model_validate(item))
        except ValidationError:
            logger.debug("Dropping malformed %s: %r", model.__name__, item)
    return kept


class SnapshotData(WireModel):
    nodes: List[SnapshotNode] = Field(default_factory=list)
    edges: List[SnapshotEdge] = Field(default_factory=list)

    @field_validator("nodes", mode="before")
    @classmethod
    def _drop_bad_nodes(cls, value: Any) -> List[Any]:
        return _keep_valid(value, SnapshotNode)

    @field_validator("edges", mode="before")
    @classmethod
    def _drop_bad_edges(cls, value: Any) -> List[Any]:
        return _keep_valid(value, SnapshotEdge)


class BaseEvent(WireModel):
    origin_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("originId", "contextId", "origin_id"),
    )
    timestamp: Optional[float] = None


class NodeEvent(BaseEvent):
    """Events that describe activity on a single node."""
    node_type: ClassVar[NodeType]
    category: ClassVar[EventCategory]
    data: NodeEventData

    @property
    def node_id(self) -> str:
        raise NotImplementedError


class SignalEvent(NodeEvent):
    type: Literal["signal:write", "signal:read"]
    data: SignalData
    node_type: ClassVar[NodeType] = NodeType.SIGNAL
    category: ClassVar[EventCategory] = EventCategory.SIGNAL

    @property
    def node_id(self) -> str:
        return self.data.signal_id


class ComputedEvent(NodeEvent):
    type: Literal["computed:read", "computed:value"]
    data: ComputedData
    node_type: ClassVar[NodeType] = NodeType.DERIVED
    category: ClassVar[EventCategory] = EventCategory.COMPUTED

    @property
    def node_id(self) -> str:
        return self.data.computed_id


class EffectEvent(NodeEvent):
    type: Literal["effect:run", "effect:created", "effect:dispose"]
    data: EffectData
    node_type: ClassVar[NodeType] = NodeType.EFFECT
    category: ClassVar[EventCategory] = EventCategory.EFFECT

    @property
    def node_id(self) -> str:
        return self.data.effect_id


class SubscribeEvent(NodeEvent):
    type: Literal["subscribe:notify"]
    data: SubscribeData
    node_type: ClassVar[NodeType] = NodeType.SUBSCRIBE
    category: ClassVar[EventCategory] = EventCategory.SUBSCRIBE

    @property
    def node_id(self) -> str:
        return self.data.subscribe_id


class DependencyEvent(BaseEvent):
    type: Literal["dependency:tracked", "dependency:pruned"]
    data: DependencyData


class SnapshotEvent(BaseEvent):
    type: Literal["graph:snapshot"]
    data: SnapshotData = Field(default_factory=SnapshotData)


InstrumentationEvent = Annotated[
    Union[
        SignalEvent,
        ComputedEvent,
        EffectEvent,
        SubscribeEvent,
        DependencyEvent,
        SnapshotEvent,
    ],
    Field(discriminator="type"),
]

_EVENT_ADAPTER: TypeAdapter = TypeAdapter(InstrumentationEvent)

KNOWN_EVENT_TYPES = frozenset({
    "signal:write", "signal:read",
    "computed:read", "computed:value",
    "effect:run", "effect:created", "effect:dispose",
    "subscribe:notify",
    "dependency:tracked", "dependency:pruned",
    "graph:snapshot",
})


class EventDecodeError(BaseModel):
    """Why a raw record was not turned into an event."""
    reason: Literal["malformed", "unknown_type"]
    event_type: Optional[str] = None
    detail: str = ""


def decode_event(raw: Any) -> Result[Any, EventDecodeError]:
    """
    Decode one raw record into an InstrumentationEvent.

    Never raises: bad input comes back as ``Err``.
    """
    if not isinstance(raw, dict):
        return Err(EventDecodeError(reason="malformed", detail="record is not an object"))

    event_type = raw.get("type")
    if not isinstance(event_type, str) or event_type not in KNOWN_EVENT_TYPES:
        return Err(EventDecodeError(
            reason="unknown_type",
            event_type=event_type if isinstance(event_type, str) else None,
        ))

    try:
        return Ok(_EVENT_ADAPTER.validate_python(raw))
    except ValidationError as e:
        return Err(EventDecodeError(
            reason="malformed",
            event_type=event_type,
            detail=f"{e.error_count()} validation error(s)",
        ))


def event_payload(event: BaseEvent) -> Dict[str, Any]:
    """The event's data as it appeared on the wire (camelCase keys)."""
    return event.data.model_dump(by_alias=True, exclude_none=True, mode="json")
