# =============================================================================
# core/dispatcher.py  —  Operation Catalog & Dispatcher
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Maps a named operation + an argument mapping onto exactly one handler and
#   ALWAYS returns a ToolResult.  No exception ever escapes `invoke()`.
#
# THE FLOW:
#   1. Look the name up in the catalog          → UnknownOperation if absent
#   2. Bind arguments against the parameter list:
#        - absent optional parameters get their declared default
#        - missing / empty required parameters   → MalformedArgument
#        - wrong primitive type                  → MalformedArgument
#        - value outside an enumerated set       → MalformedArgument
#   3. Await the handler, which returns a payload dict
#   4. Stamp the payload with `network` and an ISO-8601 UTC `timestamp`
#   5. Serialize to indented JSON
#
# RESULT ENVELOPES:
#   success → {...payload, "network": ..., "timestamp": ...}   isError=false
#   failure → {"error", "kind", "details", "fallback"}          isError=true
#
#   A mock-tier answer is a SUCCESS.  isError=true only happens for unknown
#   operations, malformed arguments, or when every tier (mock included)
#   failed.
# =============================================================================

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence
import json
import logging

from core.errors import (
    BridgeError,
    ErrorKind,
    MalformedArgument,
    UnknownOperation,
    UpstreamUnavailable,
)
from core.models import dump

logger = logging.getLogger(__name__)

PARAMETER_TYPES = ("string", "boolean", "integer")

_FALLBACK_NOTES: dict[ErrorKind, str] = {
    ErrorKind.UNKNOWN_OPERATION: "No data: the operation is not in the catalog",
    ErrorKind.MALFORMED_ARGUMENT: "No data: fix the arguments and retry",
    ErrorKind.UPSTREAM_UNAVAILABLE: "Mock data could not be generated either",
    ErrorKind.NOT_FOUND: "Using mock data due to API unavailability",
}


def _snake(name: str) -> str:
    """tokenIn → token_in; minApy → min_apy."""
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in name)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


# -----------------------------------------------------------------------------
# Parameter — one entry in an operation's argument schema
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Parameter:
    name: str                              # Wire name, camelCase ("tokenIn")
    type: str                              # "string" | "boolean" | "integer"
    description: str
    required: bool = False
    default: Any = None
    enum: Optional[tuple[str, ...]] = None # Closed set of legal values

    def __post_init__(self) -> None:
        if self.type not in PARAMETER_TYPES:
            raise ValueError(f"parameter {self.name}: unsupported type {self.type!r}")

    @property
    def keyword(self) -> str:
        """Python keyword the handler receives this parameter as."""
        return _snake(self.name)

    def json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type, "description": self.description}
        if self.enum:
            schema["enum"] = list(self.enum)
        if self.default is not None:
            schema["default"] = self.default
        return schema

    def check(self, value: Any) -> Any:
        """Validate one supplied value and return it.

        Raises:
            MalformedArgument: wrong primitive type, or a value
                outside `enum`.
        """
        if self.type == "boolean":
            ok = isinstance(value, bool)
        elif self.type == "integer":
            ok = isinstance(value, int) and not isinstance(value, bool)
        else:
            ok = isinstance(value, str)
        if not ok:
            raise MalformedArgument(
                f"'{self.name}' must be a {self.type}, got {type(value).__name__}"
            )
        if self.enum and value not in self.enum:
            raise MalformedArgument(
                f"'{self.name}' must be one of {', '.join(self.enum)}, got {value!r}"
            )
        return value


# -----------------------------------------------------------------------------
# Operation — a named, schema-described unit of work
# -----------------------------------------------------------------------------
Handler = Callable[..., Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class Operation:
    """A catalog entry.  Registered once at startup, never mutated."""

    name: str
    description: str
    handler: Handler                       # async (**keywords) -> payload dict
    parameters: tuple[Parameter, ...] = ()
    failure_message: str = "Operation failed"

    def input_schema(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {p.name: p.json_schema() for p in self.parameters},
            "required": [p.name for p in self.parameters if p.required],
        }

    def bind(self, args: Mapping[str, Any]) -> dict[str, Any]:
        """Validate `args` and return handler keywords with defaults filled in."""
        keywords: dict[str, Any] = {}
        for param in self.parameters:
            value = args.get(param.name)
            if isinstance(value, str) and not value.strip():
                value = None
            if value is None:
                if param.required:
                    raise MalformedArgument(f"'{param.name}' is required for {self.name}")
                keywords[param.keyword] = param.default
                continue
            keywords[param.keyword] = param.check(value)

        unexpected = set(args) - {p.name for p in self.parameters}
        if unexpected:
            logger.debug("%s: ignoring unexpected arguments %s", self.name, sorted(unexpected))
        return keywords


# -----------------------------------------------------------------------------
# ToolResult — what every invocation produces
# -----------------------------------------------------------------------------
@dataclass
class ToolResult:
    text: str                              # JSON document
    is_error: bool = False

    @property
    def payload(self) -> Any:
        return json.loads(self.text)

    def to_dict(self) -> dict[str, Any]:
        return {"content": [{"type": "text", "text": self.text}], "isError": self.is_error}


def error_envelope(message: str, exc: BridgeError) -> dict[str, str]:
    return {
        "error": message,
        "kind": exc.kind.value,
        "details": exc.message,
        "fallback": _FALLBACK_NOTES[exc.kind],
    }


class OperationDispatcher:
    """Routes invocations to handlers and wraps every outcome in a ToolResult."""

    def __init__(self, operations: Sequence[Operation], network: str):
        self.network = network
        self._operations: dict[str, Operation] = {}
        for op in operations:
            if op.name in self._operations:
                raise ValueError(f"duplicate operation name {op.name!r}")
            self._operations[op.name] = op

    def list_operations(self) -> list[Operation]:
        """The catalog, in registration order."""
        return list(self._operations.values())

    def describe(self) -> list[dict[str, Any]]:
        """Catalog as {name, description, inputSchema} entries."""
        return [
            {"name": op.name, "description": op.description, "inputSchema": op.input_schema()}
            for op in self._operations.values()
        ]

    def get(self, name: str) -> Operation:
        try:
            return self._operations[name]
        except KeyError:
            raise UnknownOperation(f"Unknown tool: {name}") from None

    async def invoke(self, name: str, args: Optional[Mapping[str, Any]] = None) -> ToolResult:
        """Run one operation.  Never raises.

        Args:
            name: Operation name from the catalog.
            args: Argument mapping keyed by wire (camelCase) parameter names.

        Returns:
            A ToolResult; `is_error` is True for unknown operations,
            malformed arguments and exhausted fallback chains.
        """
        try:
            op = self.get(name)
        except UnknownOperation as exc:
            logger.warning("%s", exc.message)
            return self._failure("Unknown operation", exc)

        try:
            keywords = op.bind(args or {})
            payload = await op.handler(**keywords)
        except BridgeError as exc:
            logger.warning("%s: %s (%s)", name, op.failure_message, exc.message)
            return self._failure(op.failure_message, exc)
        except Exception as exc:
            logger.exception("%s: unexpected failure", name)
            return self._failure(
                op.failure_message, UpstreamUnavailable(f"{type(exc).__name__}: {exc}")
            )

        body = dump(payload)
        body["network"] = self.network
        body["timestamp"] = utc_timestamp()
        return ToolResult(json.dumps(body, indent=2))

    def _failure(self, message: str, exc: BridgeError) -> ToolResult:
        return ToolResult(json.dumps(error_envelope(message, exc), indent=2), is_error=True)
