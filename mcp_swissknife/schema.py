"""Per-field argument contracts for tool calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence
from urllib.parse import urlparse

STRING = "string"
STRING_LIST = "string_list"
URL = "url"


class InvalidArguments(ValueError):
    """Raised when a tool's argument bag does not satisfy its contract."""

    def __init__(self, violations: Sequence[str]) -> None:
        self.violations = list(violations)
        super().__init__("; ".join(self.violations))


@dataclass(frozen=True)
class Field:
    name: str
    kind: str = STRING
    required: bool = True
    min_length: Optional[int] = None
    description: Optional[str] = None
    message: Optional[str] = None

    def check(self, value: Any) -> Optional[str]:
        """Return a violation message or ``None`` when ``value`` is acceptable."""
        if self.kind == STRING_LIST:
            if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
                return f"{self.name}: expected array of strings"
            return None

        if not isinstance(value, str):
            return f"{self.name}: expected string"
        if self.min_length is not None and len(value) < self.min_length:
            return f"{self.name}: {self.message or f'must be at least {self.min_length} characters'}"
        if self.kind == URL:
            parsed = urlparse(value)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                return f"{self.name}: {self.message or 'Invalid URL format.'}"
        return None

    def json_schema(self) -> Dict[str, Any]:
        if self.kind == STRING_LIST:
            schema: Dict[str, Any] = {"type": "array", "items": {"type": "string"}}
        else:
            schema = {"type": "string"}
            if self.kind == URL:
                schema["format"] = "uri"
            if self.min_length is not None:
                schema["minLength"] = self.min_length
        if self.description:
            schema["description"] = self.description
        return schema


@dataclass(frozen=True)
class ArgsSchema:
    fields: tuple[Field, ...] = ()

    def validate(self, arguments: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Check every field and return the accepted values; extra keys are dropped."""
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, Mapping):
            raise InvalidArguments(["arguments: expected object"])

        violations: List[str] = []
        accepted: Dict[str, Any] = {}
        for field in self.fields:
            if field.name not in arguments or arguments[field.name] is None:
                if field.required:
                    violations.append(f"{field.name}: required")
                continue
            problem = field.check(arguments[field.name])
            if problem:
                violations.append(problem)
            else:
                accepted[field.name] = arguments[field.name]

        if violations:
            raise InvalidArguments(violations)
        return accepted

    def json_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {field.name: field.json_schema() for field in self.fields},
            "required": [field.name for field in self.fields if field.required],
        }


def schema(*fields: Field) -> ArgsSchema:
    return ArgsSchema(tuple(fields))
