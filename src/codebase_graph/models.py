"""Core data models for the codebase dependency graph."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import UnitValidationError


class UnitKind(str, Enum):
    """Known unit kinds produced by the extractors."""
    MODEL = "model"
    CONTROLLER = "controller"
    SERVICE = "service"
    JOB = "job"
    MAILER = "mailer"
    COMPONENT = "component"
    CONCERN = "concern"
    GRAPHQL = "graphql"
    SERIALIZER = "serializer"
    ROUTE = "route"
    RAILS_SOURCE = "rails_source"  # framework source, vendored
    GEM_SOURCE = "gem_source"  # third-party library source, vendored


class Dependency(BaseModel):
    """A forward edge declared by a unit."""

    model_config = ConfigDict(frozen=True)

    target: str = Field(..., description="Identifier of the depended-upon unit")
    type: Optional[str] = Field(None, description="Kind of the target as seen by the extractor")
    relationship: str = Field("depends_on", description="Relationship kind, e.g. association")
    via: Optional[str] = Field(None, description="How the relationship was discovered")

    @field_validator("target")
    @classmethod
    def _target_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("dependency target must not be blank")
        return value

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> Any:
        if isinstance(value, Enum):
            return value.value
        return value


class UnitRecord(BaseModel):
    """An immutable fact about one extracted code artifact."""

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(..., description="Unique key of the unit")
    kind: str = Field(..., description="Unit kind tag, see UnitKind")
    file_path: Optional[str] = Field(None, description="Source file, informational")
    namespace: Optional[str] = Field(None, description="Enclosing namespace, informational")
    dependencies: List[Dependency] = Field(default_factory=list)

    @field_validator("identifier")
    @classmethod
    def _identifier_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("identifier must not be blank")
        return value

    @field_validator("kind", mode="before")
    @classmethod
    def _coerce_kind(cls, value: Any) -> Any:
        if isinstance(value, Enum):
            return value.value
        return value

    @field_validator("dependencies", mode="before")
    @classmethod
    def _dependencies_is_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            raise ValueError("dependencies must be a list")
        return value

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UnitRecord":
        """
        Build a unit record from a plain mapping.

        Accepts ``type`` as an alias of ``kind``, matching the extractor output.

        Raises:
            UnitValidationError: If the mapping does not describe a valid unit
        """
        if not isinstance(data, Mapping):
            raise UnitValidationError(f"expected a mapping, got {type(data).__name__}")

        payload = dict(data)
        if "kind" not in payload and "type" in payload:
            payload["kind"] = payload.pop("type")

        identifier = payload.get("identifier")
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise UnitValidationError(
                _summarize_validation_error(e),
                identifier=identifier if isinstance(identifier, str) else None,
            ) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert the record to a plain mapping."""
        return self.model_dump()


def _summarize_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ())) or "unit"
        parts.append(f"{location}: {item.get('msg')}")
    return "; ".join(parts)


@dataclass
class HubEntry:
    """A node ranked by how many units depend on it."""
    identifier: str
    kind: Optional[str]
    dependent_count: int
    dependents: List[str] = field(default_factory=list)


@dataclass
class BridgeEntry:
    """A node found on sampled shortest paths between other nodes."""
    identifier: str
    kind: Optional[str]
    score: int


@dataclass
class GraphStats:
    """Summary counts for an analysis report.

    Counts of sections that failed are left as None.
    """
    node_count: int = 0
    edge_count: int = 0
    orphan_count: Optional[int] = None
    dead_end_count: Optional[int] = None
    hub_count: Optional[int] = None
    cycle_count: Optional[int] = None
    bridge_count: Optional[int] = None


@dataclass
class AnalysisReport:
    """Structural report combining all graph analyses."""
    orphans: List[str] = field(default_factory=list)
    dead_ends: List[str] = field(default_factory=list)
    hubs: List[HubEntry] = field(default_factory=list)
    cycles: List[List[str]] = field(default_factory=list)
    bridges: List[BridgeEntry] = field(default_factory=list)
    stats: GraphStats = field(default_factory=GraphStats)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert the report to a serializable dictionary."""
        result = {
            "orphans": list(self.orphans),
            "dead_ends": list(self.dead_ends),
            "hubs": [asdict(h) for h in self.hubs],
            "cycles": [list(c) for c in self.cycles],
            "bridges": [asdict(b) for b in self.bridges],
            "stats": asdict(self.stats),
        }
        if self.errors:
            result["errors"] = dict(self.errors)
        return result
