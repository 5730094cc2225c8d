"""
Unit tests for configuration loading
Tests durations, group selection, defaults and environment overrides
"""

import pytest
from pydantic import ValidationError

from promcheck.checkers.samples import SampleMatch
from promcheck.config.loader import list_groups, load_settings, load_yaml_config, merge_configs
from promcheck.config.settings import CheckSettings, MetricSample, MetricsConfig, parse_duration
from promcheck.errors import ConfigError

CONFIG = """\
node-exporter:
  compose_file: deploy/docker-compose.yml
  container: node
  port: 9100
  wait: 500ms
  disallowed_metrics: [debug_info]
  metrics:
    - name: up
      type: gauge
      value: 1
    - name: http_requests_total
      labels: [method]
      samples:
        - labels: {method: get, code: 200}
          match: subset
  hooks:
    - name: seed
      container: db
      setup: ["psql -c 'insert into jobs values (1)'"]

external:
  base_url: http://localhost:9100
  allow_empty: true
  metrics:

broken: 42
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / ".promcheck.yaml"
    path.write_text(CONFIG)
    return str(path)


class TestParseDuration:
    """Test parse_duration"""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (3, 3.0),
            (0.25, 0.25),
            ("2", 2.0),
            ("500ms", 0.5),
            ("3s", 3.0),
            ("1m30s", 90.0),
            ("1h", 3600.0),
            ("1.5s", 1.5),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_duration(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", ["", "soon", "3 s", "5x", "s3"])
    def test_invalid(self, value):
        with pytest.raises(ValueError, match="invalid duration"):
            parse_duration(value)


class TestLoadSettings:
    """Test load_settings"""

    def test_group_is_loaded(self, config_file):
        settings = load_settings(config_file, "node-exporter")

        assert settings.compose_file == "deploy/docker-compose.yml"
        assert settings.container == "node"
        assert settings.port == 9100
        assert settings.wait == 0.5
        assert settings.disallowed_metrics == ["debug_info"]
        assert [m.name for m in settings.metrics] == ["up", "http_requests_total"]
        assert settings.metrics[0].value == 1.0
        assert settings.hooks[0].container == "db"

    def test_defaults(self, config_file):
        settings = load_settings(config_file, "external")

        assert settings.path == "/metrics"
        assert settings.wait == 3.0
        assert settings.startup_timeout == 60.0
        assert settings.metrics == []
        assert settings.hooks == []

    def test_yaml_scalars_in_labels_become_strings(self, config_file):
        sample = load_settings(config_file, "node-exporter").metrics[1].samples[0]

        assert sample.labels == {"method": "get", "code": "200"}
        assert sample.match is SampleMatch.SUBSET

    def test_missing_group(self, config_file):
        with pytest.raises(ConfigError, match="invalid group: missing"):
            load_settings(config_file, "missing")

    def test_missing_group_lists_available_groups(self, config_file):
        with pytest.raises(ConfigError, match=r"available: node-exporter, external"):
            load_settings(config_file, "missing")

    def test_non_mapping_group(self, config_file):
        with pytest.raises(ConfigError, match="invalid group: broken"):
            load_settings(config_file, "broken")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="failed to load configuration"):
            load_settings(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("exporter: [unclosed\n")

        with pytest.raises(ConfigError):
            load_settings(str(path))

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- exporter\n")

        with pytest.raises(ConfigError, match="mapping of groups"):
            load_settings(str(path))

    def test_empty_file_has_no_groups(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_yaml_config(str(path)) == {}
        with pytest.raises(ConfigError, match="available: none"):
            load_settings(str(path))

    def test_validation_error_wrapped(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("exporter:\n  path: metrics\n")

        with pytest.raises(ConfigError, match="invalid configuration for group exporter") as exc_info:
            load_settings(str(path))
        assert isinstance(exc_info.value.__cause__, ValidationError)

    def test_overrides_take_precedence_over_file(self, config_file):
        settings = load_settings(config_file, "node-exporter", {"base_url": "http://other:9100"})

        assert settings.base_url == "http://other:9100"
        assert settings.container == "node"

    def test_environment_overrides_file(self, config_file, monkeypatch):
        monkeypatch.setenv("PROMCHECK_WAIT", "2s")
        monkeypatch.setenv("PROMCHECK_CONTAINER", "node-exporter")

        settings = load_settings(config_file, "node-exporter")

        assert settings.wait == 2.0
        assert settings.container == "node-exporter"

    def test_overrides_take_precedence_over_environment(self, config_file, monkeypatch):
        monkeypatch.setenv("PROMCHECK_BASE_URL", "http://from-env:9100")
        monkeypatch.setenv("PROMCHECK_WAIT", "2s")

        settings = load_settings(config_file, "node-exporter", {"base_url": "http://from-flag:9100"})

        assert settings.base_url == "http://from-flag:9100"
        assert settings.wait == 2.0
        assert settings.metrics[0].value == 1.0

    def test_invalid_override_wrapped(self, config_file):
        with pytest.raises(ConfigError, match="invalid configuration for group node-exporter"):
            load_settings(config_file, "node-exporter", {"base_url": "http://localhost:99999"})


class TestSettingsModels:
    """Test settings model validation"""

    def test_settings_are_immutable(self):
        settings = CheckSettings(base_url="http://localhost:9100")

        with pytest.raises(ValidationError):
            settings.wait = 10

    def test_uses_compose(self):
        assert CheckSettings().uses_compose()
        assert not CheckSettings(base_url="http://localhost:9100").uses_compose()
        assert CheckSettings(
            base_url="http://localhost:9100", hooks=[{"name": "seed", "container": "db"}]
        ).uses_compose()

    @pytest.mark.parametrize("metric_type", ["counter", "Gauge", "HISTOGRAM", "summary", "untyped"])
    def test_metric_type_accepted(self, metric_type):
        assert MetricsConfig(name="up", type=metric_type).type == metric_type

    def test_unknown_metric_type_rejected(self):
        with pytest.raises(ValidationError):
            MetricsConfig(name="up", type="timer")

    def test_empty_metric_name_rejected(self):
        with pytest.raises(ValidationError):
            MetricsConfig(name="")

    def test_bool_label_value_lowercased(self):
        assert MetricSample(labels={"enabled": True}).labels == {"enabled": "true"}

    def test_sample_defaults_to_strict(self):
        assert MetricSample().match is SampleMatch.STRICT

    def test_negative_wait_rejected(self):
        with pytest.raises(ValidationError):
            CheckSettings(wait=-1)

    @pytest.mark.parametrize(
        "base_url",
        ["http://localhost:99999", "http://localhost:0", "ftp://localhost:9100", "localhost:9100", "http://"],
    )
    def test_invalid_base_url_rejected(self, base_url):
        with pytest.raises(ValidationError):
            CheckSettings(base_url=base_url)

    def test_remove_all_images_defaults_off(self):
        assert CheckSettings().remove_all_images is False


def test_merge_configs_is_deep():
    merged = merge_configs({"a": {"b": 1, "c": 2}}, None, {"a": {"c": 3}, "d": 4})

    assert merged == {"a": {"b": 1, "c": 3}, "d": 4}


def test_merge_configs_leaves_inputs_untouched():
    base = {"a": {"b": 1}}

    merge_configs(base, {"a": {"b": 2}})

    assert base == {"a": {"b": 1}}


def test_list_groups_skips_scalars():
    assert list_groups({"exporter": {}, "broken": 42, "other": {"wait": 1}}) == ["exporter", "other"]
