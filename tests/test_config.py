"""Tests for configuration loading."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from eventexporter.config import (
    ExporterConfig,
    LokiConfig,
    Settings,
    load_event,
    load_exporter_config,
)


CONFIG_YAML = """
clusterName: prod-eu
receivers:
  - name: loki
    loki:
      url: http://loki:3100/loki/api/v1/push
      streamLabels:
        app: kube-events
        cluster: prod-eu
      layout:
        reason: "{{ .Reason }}"
        object:
          kind: "{{ .InvolvedObject.Kind }}"
      headers:
        X-Scope-OrgID: "{{ .ClusterName }}"
      ignore_namespaces:
        - kube-system
      tls:
        insecureSkipVerify: true
        serverName: loki.internal
  - name: dump
"""


class TestLokiConfig:
    """Tests for LokiConfig model."""

    def test_url_required(self):
        """Test url is the only required field."""
        with pytest.raises(ValidationError):
            LokiConfig()

    def test_optional_fields_default_empty(self):
        """Test optional mappings default to empty."""
        config = LokiConfig(url="http://loki")

        assert config.layout == {}
        assert config.stream_labels == {}
        assert config.headers == {}
        assert config.ignore_namespaces == []
        assert config.tls.insecure_skip_verify is False

    def test_null_fields_become_empty(self):
        """Test explicit nulls, as left by empty YAML keys, become empty."""
        config = LokiConfig.model_validate({
            "url": "http://loki",
            "layout": None,
            "streamLabels": None,
            "headers": None,
            "ignore_namespaces": None,
            "tls": None,
        })

        assert config.layout == {}
        assert config.stream_labels == {}
        assert config.headers == {}
        assert config.ignore_namespaces == []
        assert config.tls.ca_file is None

    def test_frozen(self):
        """Test the configuration cannot be reassigned after creation."""
        config = LokiConfig(url="http://loki")

        with pytest.raises(ValidationError):
            config.url = "http://other"


class TestLoadExporterConfig:
    """Tests for load_exporter_config()."""

    def test_load_receivers(self, tmp_path):
        """Test a full receivers file loads."""
        path = tmp_path / "config.yaml"
        path.write_text(CONFIG_YAML)

        config = load_exporter_config(path)

        assert config.cluster_name == "prod-eu"
        assert [r.name for r in config.receivers] == ["loki", "dump"]
        loki = config.receivers[0].loki
        assert loki.stream_labels == {"app": "kube-events", "cluster": "prod-eu"}
        assert loki.layout["object"] == {"kind": "{{ .InvolvedObject.Kind }}"}
        assert loki.ignore_namespaces == ["kube-system"]
        assert loki.tls.server_name == "loki.internal"
        assert config.receivers[1].loki is None

    def test_empty_file(self, tmp_path):
        """Test an empty file yields no receivers."""
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_exporter_config(path).receivers == []

    def test_duplicate_receivers_rejected(self):
        """Test receiver names must be unique."""
        with pytest.raises(ValidationError, match="duplicate receiver names: loki"):
            ExporterConfig(receivers=[{"name": "loki"}, {"name": "loki"}])

    def test_missing_file(self, tmp_path):
        """Test a missing file raises."""
        with pytest.raises(FileNotFoundError):
            load_exporter_config(tmp_path / "missing.yaml")


class TestLoadEvent:
    """Tests for load_event()."""

    def test_load_json_event(self, tmp_path, event_json):
        """Test events load from JSON files."""
        path = tmp_path / "event.json"
        path.write_text(json.dumps(event_json))

        event = load_event(path)

        assert event.involved_object.name == "nginx"
        assert event.reason == "BackOff"


class TestSettings:
    """Tests for environment settings."""

    def test_env_prefix(self, monkeypatch):
        """Test settings are read from prefixed environment variables."""
        monkeypatch.setenv("EVENTEXPORTER_CONFIG_FILE", "/tmp/exporter.yaml")
        monkeypatch.setenv("EVENTEXPORTER_JSON_LOGS", "false")

        settings = Settings()

        assert settings.config_file == Path("/tmp/exporter.yaml")
        assert settings.json_logs is False
