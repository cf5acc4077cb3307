"""Tests for the configuration system."""

import pytest

from xml2csv.shared.config import (
    PRESETS,
    ConfigError,
    ConfigValidationError,
    ConverterConfig,
    DiscardPolicy,
    GlobalConfig,
    NamingConfig,
    RenderConfig,
    TokenizerConfig,
    TreeConfig,
)


class TestComponentConfigs:
    """Test suite for the per-stage configuration dataclasses."""

    def test_defaults(self):
        """Test default values of every component."""
        assert TokenizerConfig().excerpt_length == 100
        assert TreeConfig().max_tree_depth == 10000
        policy = DiscardPolicy()
        assert policy.enabled is True
        assert policy.max_distinct_values == 2
        assert policy.uninformative_values == ("", "None")
        naming = NamingConfig()
        assert naming.separator == "_"
        assert naming.skipped_tags == ("schema:created", "schema:modified")
        render = RenderConfig()
        assert (render.delimiter, render.quote_char, render.line_terminator) == (",", '"', "\n")
        assert GlobalConfig().logging_level == "WARNING"

    def test_tokenizer_config_rejects_non_positive_excerpt(self):
        """Test excerpt length must be positive."""
        with pytest.raises(ValueError, match="excerpt_length"):
            TokenizerConfig(excerpt_length=0)

    def test_tree_config_rejects_non_positive_depth(self):
        """Test depth guard must be positive."""
        with pytest.raises(ValueError, match="max_tree_depth"):
            TreeConfig(max_tree_depth=0)

    def test_render_config_rejects_multi_character_delimiter(self):
        """Test delimiter must be one character."""
        with pytest.raises(ValueError, match="single character"):
            RenderConfig(delimiter=";;")

    def test_render_config_rejects_line_break_delimiter(self):
        """Test delimiter cannot be a newline."""
        with pytest.raises(ValueError, match="line break"):
            RenderConfig(delimiter="\n")

    def test_naming_config_rejects_empty_separator(self):
        """Test separator cannot be empty."""
        with pytest.raises(ValueError, match="separator"):
            NamingConfig(separator="")

    def test_global_config_rejects_unknown_level(self):
        """Test logging level is validated."""
        with pytest.raises(ValueError, match="logging_level"):
            GlobalConfig(logging_level="LOUD")


class TestConverterConfig:
    """Test suite for the aggregate ConverterConfig."""

    def test_delimiter_equal_to_quote_is_rejected(self):
        """Test cross-component validation of delimiter and quote."""
        with pytest.raises(ConfigValidationError) as exc_info:
            ConverterConfig(render=RenderConfig(delimiter='"'))
        assert exc_info.value.field_name == "render.delimiter"
        assert exc_info.value.suggestions

    def test_separator_containing_delimiter_is_rejected(self):
        """Test column separator must not contain the delimiter."""
        with pytest.raises(ConfigValidationError, match="separator"):
            ConverterConfig(naming=NamingConfig(separator=","))

    def test_config_validation_error_is_config_error(self):
        """Test exception hierarchy."""
        assert issubclass(ConfigValidationError, ConfigError)

    def test_override_nested_field(self):
        """Test override returns a new config and leaves the original alone."""
        config = ConverterConfig()
        semicolon = config.override(render__delimiter=";")

        assert semicolon.render.delimiter == ";"
        assert config.render.delimiter == ","

    def test_override_global_component(self):
        """Test the global_ component can be overridden in both spellings."""
        config = ConverterConfig()

        assert config.override(
            global___enable_performance_profiling=True
        ).global_.enable_performance_profiling is True
        assert config.override(
            global__logging_level="DEBUG"
        ).global_.logging_level == "DEBUG"

    def test_override_unknown_component(self):
        """Test unknown component names are rejected."""
        with pytest.raises(ConfigValidationError, match="Unknown configuration component"):
            ConverterConfig().override(bogus__value=1)

    def test_override_unknown_field(self):
        """Test unknown field names are rejected."""
        with pytest.raises(ConfigValidationError):
            ConverterConfig().override(render__colour="red")

    def test_override_invalid_value_is_validated(self):
        """Test overridden values still pass validation."""
        with pytest.raises(ConfigValidationError):
            ConverterConfig().override(render__delimiter="_")

    def test_json_round_trip(self):
        """Test to_json/from_json preserves every setting."""
        config = ConverterConfig.keep_all_columns().override(
            render__delimiter=";",
            naming__skipped_tags=("meta:id",),
        )

        restored = ConverterConfig.from_json(config.to_json())

        assert restored == config
        assert restored.naming.skipped_tags == ("meta:id",)

    def test_from_dict_rejects_unknown_keys(self):
        """Test a misspelt option fails loudly."""
        with pytest.raises(ConfigValidationError, match="delimeter"):
            ConverterConfig.from_dict({"render": {"delimeter": ";"}})

    def test_from_dict_rejects_invalid_values(self):
        """Test invalid component values surface as ConfigValidationError."""
        with pytest.raises(ConfigValidationError):
            ConverterConfig.from_dict({"tree": {"max_tree_depth": -1}})

    def test_from_json_rejects_malformed_json(self):
        """Test malformed JSON is reported as a configuration error."""
        with pytest.raises(ConfigValidationError, match="Invalid configuration JSON"):
            ConverterConfig.from_json("{not json")

    def test_config_is_frozen(self):
        """Test configs cannot be mutated in place."""
        config = ConverterConfig()
        with pytest.raises(AttributeError):
            config.name = "changed"  # type: ignore[misc]


class TestPresets:
    """Test suite for configuration presets."""

    def test_default_preset(self):
        """Test default preset matches a bare config."""
        config = ConverterConfig.default()
        assert config.name == "default"
        assert config.discard.enabled is True

    def test_keep_all_columns_preset(self):
        """Test keep_all_columns disables discard and skipping."""
        config = ConverterConfig.keep_all_columns()
        assert config.discard.enabled is False
        assert config.naming.skipped_tags == ()

    def test_tab_separated_preset(self):
        """Test tab_separated uses a tab delimiter."""
        assert ConverterConfig.tab_separated().render.delimiter == "\t"

    def test_presets_registry(self):
        """Test every registered preset builds a config with its own name."""
        for name, factory in PRESETS.items():
            assert factory().name == name
