"""Pluggable property schema used to validate and normalise descriptor values."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from appmigrate.core.errors import InvalidProperty

__all__ = ["PropertySpec", "DescriptorSchema", "UPDATE_MODES"]

UPDATE_MODES = ("set", "add", "del")


class PropertySpec(BaseModel):
    type: Literal["string", "array", "integer"] = "string"
    description: str = ""
    valid_values: list[str] | None = None


class DescriptorSchema(BaseModel):
    """Known properties of one framework's descriptor."""

    framework: str
    properties: dict[str, PropertySpec] = Field(default_factory=dict)

    def normalize_property_name(self, name: str, data: dict[str, Any] | None = None) -> str | None:
        """Match *name* case-insensitively against the schema and then *data*."""
        lowered = name.lower()
        for candidate in list(self.properties) + list(data or {}):
            if candidate.lower() == lowered:
                return candidate
        return None

    def is_array(self, name: str) -> bool:
        spec = self.properties.get(name)
        return spec is not None and spec.type == "array"

    def validate_properties(self, properties: dict[str, Any]) -> list[str]:
        """Return a list of human-readable problems; empty when valid."""
        problems: list[str] = []
        for name, spec in self.properties.items():
            if name not in properties:
                continue
            value = properties[name]
            if spec.type == "array":
                if not isinstance(value, list):
                    problems.append(f"'{name}' must be a list")
                    continue
                bad = [v for v in value if spec.valid_values and v not in spec.valid_values]
                if bad:
                    problems.append(f"'{name}' has invalid values: {', '.join(map(str, bad))}")
            elif spec.type == "integer":
                if not isinstance(value, int) or isinstance(value, bool):
                    problems.append(f"'{name}' must be an integer")
            else:
                if not isinstance(value, str):
                    problems.append(f"'{name}' must be a string")
                elif spec.valid_values and value not in spec.valid_values:
                    problems.append(f"'{name}' must be one of {', '.join(spec.valid_values)}")
        return problems

    def updated_value(self, name: str, current: Any, mode: str, values: list[str]) -> Any:
        """Compute the new value of *name* for a ``set``/``add``/``del`` update."""
        if mode not in UPDATE_MODES:
            raise InvalidProperty(f"Unknown update mode '{mode}'.")
        spec = self.properties.get(name, PropertySpec())

        if spec.type != "array":
            if mode != "set":
                raise InvalidProperty(
                    f"Property '{name}' is not a collection of flags. Use set to change its value."
                )
            if len(values) != 1:
                raise InvalidProperty(f"Property '{name}' requires a single value.")
            value = values[0]
            self._check_valid(name, spec, [value])
            if spec.type == "integer":
                try:
                    return int(value)
                except ValueError:
                    raise InvalidProperty(f"Property '{name}' requires an integer value.")
            return value

        self._check_valid(name, spec, values)
        existing = list(current or [])
        if mode == "set":
            return list(values)
        if mode == "add":
            return existing + [v for v in values if v not in existing]
        missing = [v for v in values if v not in existing]
        if missing:
            raise InvalidProperty(f"Value(s) {', '.join(missing)} not present in '{name}'.")
        return [v for v in existing if v not in values]

    @staticmethod
    def _check_valid(name: str, spec: PropertySpec, values: list[str]) -> None:
        if not spec.valid_values:
            return
        bad = [v for v in values if v not in spec.valid_values]
        if bad:
            raise InvalidProperty(
                f"Invalid value(s) for '{name}': {', '.join(bad)}. "
                f"Valid values are {', '.join(spec.valid_values)}."
            )
