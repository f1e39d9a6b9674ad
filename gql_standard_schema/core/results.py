"""Result types shared by the validators."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Direction(Enum):
    """How scalar leaves are converted while validating a value."""
    NORMALIZE = "normalize"      # wire -> wire, strict
    DESERIALIZE = "deserialize"  # wire -> internal
    SERIALIZE = "serialize"      # internal -> wire


class SchemaDirection(Enum):
    """Which scalar representation a generated JSON schema describes."""
    SERIALIZED = "serialized"
    DESERIALIZED = "deserialized"


@dataclass
class Issue:
    """A single validation failure.

    ``path`` lists property names and list indices from the root value; it is
    empty for problems with the root value itself.
    """
    message: str
    path: list[str | int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "path": list(self.path)}


@dataclass
class ValidationResult:
    """Either a validated value or the list of issues found."""
    value: Any = None
    issues: list[Issue] | None = None

    @classmethod
    def success(cls, value: Any) -> "ValidationResult":
        return cls(value=value)

    @classmethod
    def failure(cls, issues: list[Issue]) -> "ValidationResult":
        return cls(issues=list(issues))

    @property
    def is_valid(self) -> bool:
        return not self.issues

    def to_dict(self) -> dict[str, Any]:
        """Return ``{"value": ...}`` or ``{"issues": [...]}``."""
        if self.issues:
            return {"issues": [issue.to_dict() for issue in self.issues]}
        return {"value": self.value}
