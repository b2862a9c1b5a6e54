"""Configuration classes for JUnit report ingestion.

This module provides immutable configuration objects for the domain mapper
and the ingest entry point. All configuration objects are frozen dataclasses
and therefore safe to share between threads.
"""

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple


class DurationPolicy(Enum):
    """How the mapper treats a duration attribute it cannot parse."""

    LENIENT = "lenient"  # Log a warning and use a zero duration
    STRICT = "strict"    # Raise DurationError and abort the ingest


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


_TAG_FIELDS = (
    "properties_tag",
    "property_tag",
    "skipped_tag",
    "failure_tag",
    "error_tag",
    "system_out_tag",
    "system_err_tag",
)


@dataclass(frozen=True)
class MappingConfig:
    """Tag and attribute names recognised by the domain mapper.

    The defaults match the common JUnit dialect. Dialects that use different
    element names can be accommodated by overriding individual fields.
    """

    suite_tags: FrozenSet[str] = frozenset({"testsuite"})
    testcase_tags: FrozenSet[str] = frozenset({"testcase"})
    properties_tag: str = "properties"
    property_tag: str = "property"
    skipped_tag: str = "skipped"
    failure_tag: str = "failure"
    error_tag: str = "error"
    system_out_tag: str = "system-out"
    system_err_tag: str = "system-err"

    # Checked in order, the first attribute present wins
    duration_attributes: Tuple[str, ...] = ("time", "duration")
    duration_policy: DurationPolicy = DurationPolicy.LENIENT

    def __post_init__(self) -> None:
        """Validate mapping configuration."""
        # Accept any iterable of names, e.g. lists coming from JSON
        object.__setattr__(self, "suite_tags", frozenset(self.suite_tags))
        object.__setattr__(self, "testcase_tags", frozenset(self.testcase_tags))
        object.__setattr__(self, "duration_attributes", tuple(self.duration_attributes))
        if isinstance(self.duration_policy, str):
            object.__setattr__(
                self, "duration_policy", DurationPolicy(self.duration_policy.lower())
            )

        if not self.suite_tags:
            raise ConfigValidationError(
                "suite_tags must not be empty", field_name="suite_tags"
            )
        if not self.testcase_tags:
            raise ConfigValidationError(
                "testcase_tags must not be empty", field_name="testcase_tags"
            )
        if self.suite_tags & self.testcase_tags:
            raise ConfigValidationError(
                "suite_tags and testcase_tags must not overlap",
                field_name="testcase_tags",
                suggestions=["Remove the shared tag name from one of the sets"],
            )
        for name in _TAG_FIELDS:
            if not getattr(self, name):
                raise ConfigValidationError(f"{name} must not be empty", field_name=name)
        if not self.duration_attributes:
            raise ConfigValidationError(
                "duration_attributes must name at least one attribute",
                field_name="duration_attributes",
                suggestions=['Use ("time",) for the common dialect'],
            )


@dataclass(frozen=True)
class IngestConfig:
    """Top-level configuration for the ingest entry point.

    Example:
        >>> config = IngestConfig.strict().override(mapping__skipped_tag="skip")
        >>> config.mapping.duration_policy
        <DurationPolicy.STRICT: 'strict'>
    """

    mapping: MappingConfig = field(default_factory=MappingConfig)
    correlation_id: Optional[str] = None
    aggregate: bool = True
    max_input_size_bytes: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate ingest configuration."""
        if self.max_input_size_bytes is not None and self.max_input_size_bytes <= 0:
            raise ConfigValidationError(
                "max_input_size_bytes must be > 0 or None",
                field_name="max_input_size_bytes",
            )

    def override(self, **kwargs: Any) -> "IngestConfig":
        """Create a new configuration with specific overrides.

        Nested mapping fields use double-underscore notation, e.g.
        ``mapping__duration_policy=DurationPolicy.STRICT``.

        Args:
            **kwargs: Configuration fields to override

        Returns:
            New IngestConfig instance with overrides applied
        """
        mapping_overrides: Dict[str, Any] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component != "mapping":
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=["Nested overrides are only supported for mapping"],
                    )
                mapping_overrides[field_name] = value
            else:
                top_level[key] = value

        if mapping_overrides:
            base = top_level.get("mapping", self.mapping)
            top_level["mapping"] = replace(base, **mapping_overrides)

        return replace(self, **top_level)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a JSON-compatible dictionary."""
        mapping: Dict[str, Any] = {}
        for config_field in fields(self.mapping):
            value = getattr(self.mapping, config_field.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, frozenset):
                value = sorted(value)
            elif isinstance(value, tuple):
                value = list(value)
            mapping[config_field.name] = value

        return {
            "mapping": mapping,
            "correlation_id": self.correlation_id,
            "aggregate": self.aggregate,
            "max_input_size_bytes": self.max_input_size_bytes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IngestConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos do not silently fall back to
        default behaviour.
        """
        known = {config_field.name for config_field in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration keys: {', '.join(sorted(unknown))}",
                suggestions=sorted(known),
            )

        values = dict(data)
        if "mapping" in values and isinstance(values["mapping"], dict):
            try:
                values["mapping"] = MappingConfig(**values["mapping"])
            except (TypeError, ValueError) as e:
                raise ConfigValidationError(
                    f"Invalid mapping configuration: {e}", field_name="mapping"
                ) from e
        return cls(**values)

    @classmethod
    def lenient(cls) -> "IngestConfig":
        """Unparsable durations fall back to zero."""
        return cls()

    @classmethod
    def strict(cls) -> "IngestConfig":
        """Unparsable durations abort the ingest."""
        return cls(mapping=MappingConfig(duration_policy=DurationPolicy.STRICT))
