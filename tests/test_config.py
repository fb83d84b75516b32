"""Unit tests for configuration loading."""

import pytest
import yaml

from tfaws.config import Config, ConfigValidationError, ProviderConfig, SweepConfig


def _write(tmp_path, data):
    path = tmp_path / "tfaws.yaml"
    path.write_text(yaml.dump(data) if not isinstance(data, str) else data)
    return str(path)


class TestConfig:
    """Loading tfaws.yaml with environment overrides."""

    def test_load_valid_config(self, tmp_path):
        path = _write(tmp_path, {
            "provider": {
                "region": "us-west-2",
                "default_tags": {"env": "test"},
                "ignore_tags": {"key_prefixes": ["ext:"]},
            },
            "sweep": {"regions": ["us-west-2", "us-east-1"], "sweepers": ["aws_internetmonitor_monitor"]},
        })

        config = Config(path, environ={}).load()

        assert config.provider.region == "us-west-2"
        assert config.provider.default_tags == {"env": "test"}
        assert config.provider.ignore_tags.key_prefixes == ["ext:"]
        assert config.sweep.regions == ["us-west-2", "us-east-1"]

    def test_missing_default_file_is_empty(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = Config(environ={}).load()
        assert config.provider == ProviderConfig()

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config(str(tmp_path / "nope.yaml"), environ={}).load()

    def test_invalid_yaml(self, tmp_path):
        path = _write(tmp_path, "provider: [unclosed")
        with pytest.raises(ConfigValidationError, match="Failed to parse YAML"):
            Config(path, environ={}).load()

    def test_validation_errors_collected(self, tmp_path):
        path = _write(tmp_path, {"provider": {"region": "Mars", "default_tags": {"aws:x": "1"}}})

        with pytest.raises(ConfigValidationError) as exc_info:
            Config(path, environ={}).load()

        assert len(exc_info.value.errors) == 2
        assert "provider -> region" in str(exc_info.value)

    def test_environment_overrides(self, tmp_path):
        path = _write(tmp_path, {"provider": {"region": "us-west-2"}})

        config = Config(path, environ={
            "AWS_DEFAULT_REGION": "eu-west-1",
            "AWS_PROFILE": "sandbox",
            "SWEEP": "us-east-1,us-east-2,us-east-1",
            "SWEEP_RUN": "aws_internetmonitor_monitor",
            "SWEEP_ALLOW_FAILURES": "true",
        }).load()

        assert config.provider.region == "eu-west-1"
        assert config.provider.profile == "sandbox"
        assert config.sweep.regions == ["us-east-1", "us-east-2"]
        assert config.sweep.sweepers == ["aws_internetmonitor_monitor"]
        assert config.sweep.allow_failures is True

    def test_sweep_defaults_to_provider_region(self, tmp_path):
        path = _write(tmp_path, {"provider": {"region": "ap-southeast-2"}})
        assert Config(path, environ={}).load().sweep.regions == ["ap-southeast-2"]

    def test_to_dict(self, tmp_path):
        path = _write(tmp_path, {"provider": {"region": "us-west-2"}})
        data = Config(path, environ={}).load().to_dict()
        assert data["provider"]["region"] == "us-west-2"
        assert data["sweep"] == SweepConfig(regions=["us-west-2"]).model_dump()
