"""Configuration classes for xml2csv.

This module provides configuration objects for every pipeline stage,
enabling fine-tuned control over tokenization limits, the discard
heuristic, column naming and the delimited output format.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

COMPONENT_FIELDS = ("tokenizer", "tree", "discard", "naming", "render", "global_")


@dataclass
class TokenizerConfig:
    """Configuration for the markup tokenizer."""

    excerpt_length: int = 100
    declaration_prefix: str = "<?xml"

    def __post_init__(self) -> None:
        """Validate tokenizer configuration."""
        if self.excerpt_length <= 0:
            raise ValueError("excerpt_length must be > 0")
        if not self.declaration_prefix.startswith("<"):
            raise ValueError("declaration_prefix must start with '<'")


@dataclass
class TreeConfig:
    """Configuration for tree building."""

    max_tree_depth: int = 10000

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if self.max_tree_depth <= 0:
            raise ValueError("max_tree_depth must be > 0")


@dataclass
class DiscardPolicy:
    """Thresholds for dropping fields that never carry information.

    A tag name is discarded when it was observed with at most
    ``max_distinct_values`` distinct trimmed values and every one of them is
    listed in ``uninformative_values``.
    """

    enabled: bool = True
    max_distinct_values: int = 2
    uninformative_values: Tuple[str, ...] = ("", "None")

    def __post_init__(self) -> None:
        """Validate discard policy."""
        if self.max_distinct_values < 0:
            raise ValueError("max_distinct_values must be >= 0")


@dataclass
class NamingConfig:
    """Configuration for path-derived column names."""

    separator: str = "_"
    skipped_tags: Tuple[str, ...] = ("schema:created", "schema:modified")

    def __post_init__(self) -> None:
        """Validate naming configuration."""
        if not self.separator:
            raise ValueError("separator cannot be empty")


@dataclass
class RenderConfig:
    """Configuration for delimited text output."""

    delimiter: str = ","
    quote_char: str = '"'
    line_terminator: str = "\n"

    def __post_init__(self) -> None:
        """Validate render configuration."""
        if len(self.delimiter) != 1:
            raise ValueError("delimiter must be a single character")
        if len(self.quote_char) != 1:
            raise ValueError("quote_char must be a single character")
        if self.delimiter in ("\r", "\n"):
            raise ValueError("delimiter cannot be a line break")
        if not self.line_terminator:
            raise ValueError("line_terminator cannot be empty")


@dataclass
class GlobalConfig:
    """Global configuration settings that apply across all components."""

    logging_level: str = "WARNING"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    enable_performance_profiling: bool = False

    def __post_init__(self) -> None:
        """Validate global configuration."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.logging_level not in valid_levels:
            raise ValueError(f"logging_level must be one of {valid_levels}")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ConverterConfig:
    """Complete configuration for the document-to-table pipeline.

    Immutable: derive variants with :meth:`override` or the preset
    constructors rather than mutating an instance in place.
    """

    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    discard: DiscardPolicy = field(default_factory=DiscardPolicy)
    naming: NamingConfig = field(default_factory=NamingConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    # Metadata
    version: str = "1.0.0"
    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete converter configuration."""
        try:
            for component in COMPONENT_FIELDS:
                getattr(self, component).__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        self._validate_cross_component_dependencies()

    def _validate_cross_component_dependencies(self) -> None:
        """Validate dependencies between different component configurations."""
        if self.render.delimiter == self.render.quote_char:
            raise ConfigValidationError(
                "Delimiter and quote character must differ",
                field_name="render.delimiter",
                suggestions=["Use ',' or '\\t' as delimiter",
                             "Keep the default '\"' quote character"],
            )
        if self.render.delimiter in self.naming.separator:
            raise ConfigValidationError(
                f"Column separator {self.naming.separator!r} contains the "
                f"output delimiter {self.render.delimiter!r}",
                field_name="naming.separator",
                suggestions=["Choose a separator without the delimiter"],
            )

    def override(self, **kwargs: Any) -> "ConverterConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Keyword arguments for configuration fields to override,
                using ``component__field`` for nested fields

        Returns:
            New ConverterConfig instance with overrides applied

        Example:
            >>> config = ConverterConfig()
            >>> tsv = config.override(render__delimiter="\\t")
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                # global_ is spelt with a trailing underscore: global___field
                if component == "global":
                    component, field_name = "global_", field_name.lstrip("_")
                if component not in COMPONENT_FIELDS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=[f"Use one of {list(COMPONENT_FIELDS)}"],
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        for field_name in COMPONENT_FIELDS:
            current_config = getattr(self, field_name)
            if field_name in nested_overrides:
                try:
                    new_fields[field_name] = replace(
                        current_config, **nested_overrides[field_name]
                    )
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=field_name) from e
            else:
                new_fields[field_name] = current_config

        for key, value in nested_overrides.items():
            if key not in COMPONENT_FIELDS:
                new_fields[key] = value

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format.

        Returns:
            Dictionary representation of the configuration
        """
        def _dataclass_to_dict(obj: Any) -> Any:
            """Recursively convert dataclass to dict."""
            if hasattr(obj, "__dataclass_fields__"):
                result: Dict[str, Any] = {}
                for field_name in obj.__dataclass_fields__:
                    result[field_name] = _dataclass_to_dict(getattr(obj, field_name))
                return result
            if isinstance(obj, Enum):
                return obj.name
            if isinstance(obj, (list, tuple, set, frozenset)):
                return [_dataclass_to_dict(item) for item in obj]
            if isinstance(obj, dict):
                return {key: _dataclass_to_dict(value) for key, value in obj.items()}
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConverterConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that a misspelt option in a config file
        fails loudly instead of being ignored.

        Args:
            data: Dictionary containing configuration data

        Returns:
            ConverterConfig instance created from dictionary
        """
        def _dict_to_dataclass(data_dict: Dict[str, Any], target_class: type) -> Any:
            """Convert dict to dataclass instance."""
            if not isinstance(data_dict, dict):
                raise ConfigValidationError(
                    f"Expected a mapping for {target_class.__name__}, "
                    f"got {type(data_dict).__name__}"
                )

            known = target_class.__dataclass_fields__
            unknown = sorted(set(data_dict) - set(known))
            if unknown:
                raise ConfigValidationError(
                    f"Unknown {target_class.__name__} field(s): {', '.join(unknown)}",
                    field_name=unknown[0],
                    suggestions=[f"Valid fields: {', '.join(known)}"],
                )

            field_values: Dict[str, Any] = {}
            for field_name, field_info in known.items():
                if field_name not in data_dict:
                    continue
                value = data_dict[field_name]
                field_type = field_info.type

                if hasattr(field_type, "__dataclass_fields__"):
                    field_values[field_name] = _dict_to_dataclass(value, field_type)
                elif isinstance(value, list):
                    field_values[field_name] = tuple(value)
                else:
                    field_values[field_name] = value

            try:
                return target_class(**field_values)
            except ValueError as e:
                raise ConfigValidationError(str(e)) from e

        result = _dict_to_dataclass(data, cls)
        if not isinstance(result, cls):
            raise ConfigValidationError(f"Failed to deserialize to {cls.__name__}")
        return result

    @classmethod
    def from_json(cls, json_str: str) -> "ConverterConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def default(cls) -> "ConverterConfig":
        """Create the default configuration: comma-separated, discard enabled."""
        return cls(name="default")

    @classmethod
    def keep_all_columns(cls) -> "ConverterConfig":
        """Create preset that emits every leaf column, informative or not."""
        return cls(
            discard=DiscardPolicy(enabled=False),
            naming=NamingConfig(skipped_tags=()),
            name="keep_all_columns",
            description="Keep every discovered column, including empty ones",
        )

    @classmethod
    def tab_separated(cls) -> "ConverterConfig":
        """Create preset that writes tab-separated values."""
        return cls(
            render=RenderConfig(delimiter="\t"),
            name="tab_separated",
            description="Tab-separated output with the default discard policy",
        )


PRESETS = {
    "default": ConverterConfig.default,
    "keep_all_columns": ConverterConfig.keep_all_columns,
    "tab_separated": ConverterConfig.tab_separated,
}
