"""Tests for ingest configuration objects."""

import json

import pytest

from junit_ingest.shared.config import (
    ConfigValidationError,
    DurationPolicy,
    IngestConfig,
    MappingConfig,
)


class TestMappingConfig:
    """Test MappingConfig defaults and validation."""

    def test_defaults_match_common_dialect(self) -> None:
        """Test default tag names."""
        config = MappingConfig()

        assert config.suite_tags == frozenset({"testsuite"})
        assert config.testcase_tags == frozenset({"testcase"})
        assert config.skipped_tag == "skipped"
        assert config.failure_tag == "failure"
        assert config.error_tag == "error"
        assert config.system_out_tag == "system-out"
        assert config.system_err_tag == "system-err"
        assert config.duration_attributes == ("time", "duration")
        assert config.duration_policy is DurationPolicy.LENIENT

    def test_iterables_are_normalized(self) -> None:
        """Test that lists are converted to immutable collections."""
        config = MappingConfig(
            suite_tags=["testsuite", "suite"],  # type: ignore[arg-type]
            duration_attributes=["elapsed"],  # type: ignore[arg-type]
        )

        assert config.suite_tags == frozenset({"testsuite", "suite"})
        assert config.duration_attributes == ("elapsed",)

    def test_policy_accepts_string(self) -> None:
        """Test that the duration policy can be given by value."""
        config = MappingConfig(duration_policy="STRICT")  # type: ignore[arg-type]

        assert config.duration_policy is DurationPolicy.STRICT

    def test_empty_suite_tags_rejected(self) -> None:
        """Test that at least one suite tag is required."""
        with pytest.raises(ConfigValidationError, match="suite_tags must not be empty"):
            MappingConfig(suite_tags=frozenset())

    def test_overlapping_tags_rejected(self) -> None:
        """Test that a tag cannot be both a suite and a testcase."""
        with pytest.raises(ConfigValidationError, match="must not overlap") as exc_info:
            MappingConfig(
                suite_tags=frozenset({"testsuite"}),
                testcase_tags=frozenset({"testsuite"}),
            )

        assert exc_info.value.field_name == "testcase_tags"
        assert exc_info.value.suggestions

    def test_empty_tag_name_rejected(self) -> None:
        """Test that single tag names cannot be blank."""
        with pytest.raises(ConfigValidationError, match="skipped_tag must not be empty"):
            MappingConfig(skipped_tag="")

    def test_empty_duration_attributes_rejected(self) -> None:
        """Test that at least one duration attribute is required."""
        with pytest.raises(ConfigValidationError, match="duration_attributes"):
            MappingConfig(duration_attributes=())

    def test_config_is_frozen(self) -> None:
        """Test that configuration objects are immutable."""
        config = MappingConfig()

        with pytest.raises(AttributeError):
            config.skipped_tag = "skip"  # type: ignore[misc]


class TestIngestConfig:
    """Test IngestConfig presets, overrides and serialization."""

    def test_presets(self) -> None:
        """Test lenient and strict presets."""
        assert IngestConfig.lenient().mapping.duration_policy is DurationPolicy.LENIENT
        assert IngestConfig.strict().mapping.duration_policy is DurationPolicy.STRICT

    def test_invalid_size_limit_rejected(self) -> None:
        """Test that the input size limit must be positive."""
        with pytest.raises(ConfigValidationError, match="max_input_size_bytes"):
            IngestConfig(max_input_size_bytes=0)

    def test_override_top_level_and_nested(self) -> None:
        """Test override with double-underscore notation."""
        config = IngestConfig()

        new_config = config.override(
            aggregate=False,
            mapping__skipped_tag="skip",
            mapping__duration_policy=DurationPolicy.STRICT,
        )

        assert new_config.aggregate is False
        assert new_config.mapping.skipped_tag == "skip"
        assert new_config.mapping.duration_policy is DurationPolicy.STRICT
        # Original is unchanged
        assert config.aggregate is True
        assert config.mapping.skipped_tag == "skipped"

    def test_override_unknown_component_rejected(self) -> None:
        """Test that only the mapping component supports nested overrides."""
        with pytest.raises(ConfigValidationError, match="Unknown configuration component"):
            IngestConfig().override(tree__depth=3)

    def test_to_dict_is_json_compatible(self) -> None:
        """Test that to_dict output can be serialized to JSON."""
        data = IngestConfig.strict().to_dict()

        encoded = json.dumps(data)

        assert json.loads(encoded)["mapping"]["duration_policy"] == "strict"
        assert data["mapping"]["suite_tags"] == ["testsuite"]
        assert data["mapping"]["duration_attributes"] == ["time", "duration"]

    def test_dict_round_trip(self) -> None:
        """Test that from_dict restores an equal configuration."""
        original = IngestConfig(
            correlation_id="run-1",
            max_input_size_bytes=1024,
            mapping=MappingConfig(suite_tags=frozenset({"testsuite", "suite"})),
        )

        restored = IngestConfig.from_dict(json.loads(json.dumps(original.to_dict())))

        assert restored == original

    def test_from_dict_rejects_unknown_keys(self) -> None:
        """Test that typos in configuration keys are reported."""
        with pytest.raises(ConfigValidationError, match="Unknown configuration keys: agregate"):
            IngestConfig.from_dict({"agregate": False})

    def test_from_dict_rejects_invalid_mapping(self) -> None:
        """Test that invalid nested mapping data is reported."""
        with pytest.raises(ConfigValidationError, match="Invalid mapping configuration"):
            IngestConfig.from_dict({"mapping": {"duration_policy": "sometimes"}})
