from openapi_model_generator.pipeline import CodeGeneratorConfig, FormatterConfig, OutputMode


class TestCodeGeneratorConfig:
    """Test configuration loading"""

    def test_defaults(self):
        config = CodeGeneratorConfig()
        assert config.type_extension == "x-rust-type"
        assert config.attrs_extension == "x-rust-attrs"
        assert config.include_operations is True
        assert config.derives == ["Debug", "Clone", "Serialize", "Deserialize"]
        assert config.output.mode == OutputMode.ERROR_IF_EXISTS
        assert config.formatter.enabled is False

    def test_from_dict(self):
        config = CodeGeneratorConfig.from_dict(
            {
                "ignore_schemas": ["Legacy"],
                "format_overrides": {"semver": "semver::Version"},
                "formatter": {"enabled": True, "edition": "2018"},
                "output": {"mode": "force", "atomic_write": False},
                "unknown_option": 1,
            }
        )
        assert config.ignore_schemas == ["Legacy"]
        assert config.format_overrides == {"semver": "semver::Version"}
        assert config.formatter == FormatterConfig(enabled=True, edition="2018")
        assert config.output.mode == OutputMode.FORCE
        assert config.output.atomic_write is False
        assert config.output.validate_before_write is True
        assert not hasattr(config, "unknown_option")

    def test_round_trip(self):
        config = CodeGeneratorConfig(models_file_name="api.rs", include_operations=False)
        assert CodeGeneratorConfig.from_dict(config.to_dict()) == config
