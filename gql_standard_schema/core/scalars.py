"""Custom scalar handlers.

A handler converts a custom scalar between its wire representation (what
travels as JSON) and its internal Python representation, and describes both
shapes as JSON schema fragments.

Example usage:
    from gql_standard_schema.core.scalars import ScalarRegistry

    registry = ScalarRegistry()

    class MoneyHandler:
        description = "An amount of money as a decimal string"
        serialized_json_schema = {"type": "string", "pattern": r"^-?\\d+(\\.\\d+)?$"}
        deserialized_json_schema = {"type": "number"}
        default_value = "0"

        def serialize(self, value):
            if not isinstance(value, Decimal):
                raise TypeError(f"Money cannot serialize non-Decimal value: {value!r}")
            return str(value)

        def deserialize(self, value):
            try:
                return Decimal(value)
            except (InvalidOperation, TypeError) as exc:
                raise ValueError(f"Money cannot represent value: {value!r}") from exc

    registry.register("Money", MoneyHandler())

Both conversion functions must either return a value or raise. The message of
the raised ``TypeError``/``ValueError`` is reported verbatim as the validation
issue for the offending field.
"""

from datetime import date, datetime
from typing import Any, Protocol, runtime_checkable
from uuid import UUID

from .errors import UnknownScalar


@runtime_checkable
class ScalarHandler(Protocol):
    """Protocol for custom scalar handlers.

    Attributes:
        serialized_json_schema: JSON schema of the wire representation
        deserialized_json_schema: JSON schema of the internal representation
    """

    serialized_json_schema: dict[str, Any]
    deserialized_json_schema: dict[str, Any]

    def serialize(self, value: Any) -> Any:
        """Convert an internal Python value to its wire representation."""
        ...

    def deserialize(self, value: Any) -> Any:
        """Convert a wire value to its internal Python representation."""
        ...


class DateTimeHandler:
    """Handler for DateTime scalars using ISO 8601 format."""

    description = "An ISO 8601 date-time string"
    serialized_json_schema = {"type": "string", "format": "date-time"}
    deserialized_json_schema = {
        "type": "string",
        "format": "date-time",
        "description": "A datetime.datetime instance",
    }
    default_value = "1970-01-01T00:00:00+00:00"

    def serialize(self, value: datetime) -> str:
        """Convert datetime to ISO 8601 string."""
        if not isinstance(value, datetime):
            raise TypeError(f"DateTime cannot serialize non-datetime value: {value!r}")
        return value.isoformat()

    def deserialize(self, value: str) -> datetime:
        """Parse ISO 8601 string to datetime."""
        if not isinstance(value, str):
            raise TypeError(f"DateTime cannot represent non-string value: {value!r}")
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as exc:
            raise ValueError(f"DateTime cannot represent value: {value!r}") from exc


class DateHandler:
    """Handler for Date scalars using ISO 8601 date format."""

    description = "An ISO 8601 date string (YYYY-MM-DD)"
    serialized_json_schema = {"type": "string", "format": "date"}
    deserialized_json_schema = {
        "type": "string",
        "format": "date",
        "description": "A datetime.date instance",
    }
    default_value = "1970-01-01"

    def serialize(self, value: date) -> str:
        """Convert date to ISO 8601 string."""
        if not isinstance(value, date) or isinstance(value, datetime):
            raise TypeError(f"Date cannot serialize non-date value: {value!r}")
        return value.isoformat()

    def deserialize(self, value: str) -> date:
        """Parse ISO 8601 date string."""
        if not isinstance(value, str):
            raise TypeError(f"Date cannot represent non-string value: {value!r}")
        try:
            return date.fromisoformat(value)
        except ValueError as exc:
            raise ValueError(f"Date cannot represent value: {value!r}") from exc


class UUIDHandler:
    """Handler for UUID scalars."""

    description = "A UUID in its canonical string form"
    serialized_json_schema = {"type": "string", "format": "uuid"}
    deserialized_json_schema = {
        "type": "string",
        "format": "uuid",
        "description": "A uuid.UUID instance",
    }
    default_value = "00000000-0000-0000-0000-000000000000"

    def serialize(self, value: UUID) -> str:
        """Convert UUID to string."""
        if not isinstance(value, UUID):
            raise TypeError(f"UUID cannot serialize non-UUID value: {value!r}")
        return str(value)

    def deserialize(self, value: str) -> UUID:
        """Parse string to UUID."""
        if not isinstance(value, str):
            raise TypeError(f"UUID cannot represent non-string value: {value!r}")
        try:
            return UUID(value)
        except ValueError as exc:
            raise ValueError(f"UUID cannot represent value: {value!r}") from exc


class JSONHandler:
    """Handler for JSON scalars (pass-through)."""

    description = "Arbitrary JSON"
    serialized_json_schema: dict[str, Any] = {}
    deserialized_json_schema: dict[str, Any] = {}

    def serialize(self, value: Any) -> Any:
        """JSON values are already serializable."""
        return value

    def deserialize(self, value: Any) -> Any:
        """JSON values are already deserialized."""
        return value


class JSONObjectHandler(JSONHandler):
    """Handler for JSONObject scalars: a pass-through that only accepts objects."""

    description = "An arbitrary JSON object"
    serialized_json_schema = {"type": "object"}
    deserialized_json_schema = {"type": "object"}

    def serialize(self, value: Any) -> Any:
        if not isinstance(value, dict):
            raise TypeError(f"JSONObject cannot represent non-object value: {value!r}")
        return value

    def deserialize(self, value: Any) -> Any:
        return self.serialize(value)


class ScalarRegistry:
    """Registry for custom scalar handlers.

    Manages the mapping between GraphQL scalar names and their handlers.

    Example:
        registry = ScalarRegistry()
        registry.register("DateTime", DateTimeHandler())

        handler = registry.get("DateTime")
        if handler:
            wire_schema = handler.serialized_json_schema
    """

    def __init__(
        self,
        handlers: dict[str, ScalarHandler] | None = None,
        *,
        include_defaults: bool = True,
    ):
        self._handlers: dict[str, ScalarHandler] = {}
        if include_defaults:
            self._register_defaults()
        for name, handler in (handlers or {}).items():
            self.register(name, handler)

    def _register_defaults(self):
        """Register built-in default handlers."""
        self.register("DateTime", DateTimeHandler())
        self.register("Date", DateHandler())
        self.register("UUID", UUIDHandler())
        self.register("JSON", JSONHandler())
        self.register("JSONObject", JSONObjectHandler())

    def register(self, scalar_name: str, handler: ScalarHandler):
        """Register a handler for a scalar type."""
        if not isinstance(handler, ScalarHandler):
            raise TypeError(
                f"Handler for scalar {scalar_name} must implement serialize, deserialize, "
                f"serialized_json_schema and deserialized_json_schema."
            )
        self._handlers[scalar_name] = handler

    def get(self, scalar_name: str) -> ScalarHandler | None:
        """Get the handler for a scalar type, or None if not registered."""
        return self._handlers.get(scalar_name)

    def has(self, scalar_name: str) -> bool:
        """Check if a handler is registered for a scalar type."""
        return scalar_name in self._handlers

    def require(self, scalar_name: str) -> ScalarHandler:
        """Get the handler for a scalar type, raising UnknownScalar if missing."""
        handler = self._handlers.get(scalar_name)
        if handler is None:
            raise UnknownScalar(scalar_name)
        return handler

    def names(self) -> list[str]:
        return sorted(self._handlers)

    @classmethod
    def coerce(cls, scalars: "ScalarRegistry | dict[str, ScalarHandler] | None") -> "ScalarRegistry":
        """Accept a registry, a plain name -> handler mapping, or None."""
        if isinstance(scalars, ScalarRegistry):
            return scalars
        return cls(scalars)
