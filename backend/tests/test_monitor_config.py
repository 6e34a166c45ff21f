"""Tests for monitor configuration validation and the probe view."""
import pytest

from pulsewatch.errors import ValidationError
from pulsewatch.services.monitor_config import (
    MONITOR_TYPES,
    is_actively_probed,
    probe_config,
    relevant_fields,
    validate_monitor,
)


def _draft(**overrides):
    draft = {
        "name": "API",
        "type": "http",
        "target": "https://api.example.com/health",
        "interval": 60,
        "timeout": 10,
        "max_retries": 0,
        "enabled": True,
    }
    draft.update(overrides)
    return draft


class TestRequiredFields:
    @pytest.mark.parametrize("monitor_type", [t for t in MONITOR_TYPES if t != "push"])
    @pytest.mark.parametrize("target", [None, "", "   "])
    def test_target_required_for_every_non_push_type(self, monitor_type, target):
        draft = _draft(type=monitor_type, target=target, keyword="ok")
        with pytest.raises(ValidationError, match="target is required"):
            validate_monitor(draft)

    def test_push_needs_no_target(self):
        validated = validate_monitor(_draft(type="push", target=None))
        assert validated["type"] == "push"

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_name_must_not_be_empty(self, name):
        with pytest.raises(ValidationError, match="name"):
            validate_monitor(_draft(name=name))

    def test_name_is_trimmed(self):
        assert validate_monitor(_draft(name="  API  "))["name"] == "API"

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError, match="type must be one of"):
            validate_monitor(_draft(type="smtp"))


class TestNumericBounds:
    def test_interval_minimum(self):
        assert validate_monitor(_draft(interval=10))["interval"] == 10
        with pytest.raises(ValidationError, match="interval"):
            validate_monitor(_draft(interval=9))

    def test_timeout_minimum(self):
        assert validate_monitor(_draft(timeout=1))["timeout"] == 1
        with pytest.raises(ValidationError, match="timeout"):
            validate_monitor(_draft(timeout=0))

    def test_max_retries_non_negative(self):
        assert validate_monitor(_draft(max_retries=0))["max_retries"] == 0
        with pytest.raises(ValidationError, match="max_retries"):
            validate_monitor(_draft(max_retries=-1))

    def test_booleans_are_not_integers(self):
        with pytest.raises(ValidationError, match="interval must be an integer"):
            validate_monitor(_draft(interval=True))


class TestHttpFamily:
    @pytest.mark.parametrize("path,value", [("$.status", None), (None, "ok"), ("$.status", "")])
    def test_json_path_and_value_must_come_together(self, path, value):
        with pytest.raises(ValidationError, match="json_path and json_value"):
            validate_monitor(_draft(type="http_json", json_path=path, json_value=value))

    def test_json_path_and_value_both_set_or_both_absent(self):
        validate_monitor(_draft(type="http_json", json_path="$.status", json_value="ok"))
        validate_monitor(_draft(type="http_json"))

    def test_keyword_required_for_http_keyword(self):
        with pytest.raises(ValidationError, match="keyword"):
            validate_monitor(_draft(type="http_keyword"))
        validate_monitor(_draft(type="http_keyword", keyword="healthy"))

    def test_target_scheme(self):
        with pytest.raises(ValidationError, match="http:// or https://"):
            validate_monitor(_draft(target="example.com"))
        with pytest.raises(ValidationError, match="ws:// or wss://"):
            validate_monitor(_draft(type="ws", target="https://example.com/socket"))

    def test_headers_must_be_json_object(self):
        with pytest.raises(ValidationError, match="headers"):
            validate_monitor(_draft(headers="not json"))
        with pytest.raises(ValidationError, match="headers"):
            validate_monitor(_draft(headers="[1, 2]"))
        validate_monitor(_draft(headers='{"Authorization": "Bearer x"}'))

    def test_method_normalized(self):
        assert validate_monitor(_draft(method="post"))["method"] == "POST"
        with pytest.raises(ValidationError, match="method"):
            validate_monitor(_draft(method="FETCH"))

    @pytest.mark.parametrize("expected", ["200", "2xx", "200, 301,3xx"])
    def test_expected_status_accepted(self, expected):
        validate_monitor(_draft(expected_status=expected))

    def test_expected_status_rejected(self):
        with pytest.raises(ValidationError, match="expected_status"):
            validate_monitor(_draft(expected_status="ok"))


class TestInertFields:
    def test_foreign_fields_tolerated_and_kept(self):
        validated = validate_monitor(
            _draft(type="tcp", target="db.internal:5432", headers="garbage", json_path="$.x")
        )
        assert validated["headers"] == "garbage"
        assert validated["json_path"] == "$.x"

    def test_probe_config_only_carries_active_fields(self):
        monitor = _draft(
            id=3,
            type="tcp",
            target="db.internal:5432",
            headers='{"X": "1"}',
            keyword="stale",
            json_path="$.a",
            json_value="b",
        )
        config = probe_config(monitor)
        assert config["target"] == "db.internal:5432"
        for name in ("headers", "keyword", "json_path", "json_value", "method"):
            assert name not in config

    def test_probe_config_for_http_json(self):
        config = probe_config(_draft(id=1, type="http_json", json_path="$.a", json_value="b", keyword="stale"))
        assert config["json_path"] == "$.a"
        assert config["method"] == "GET"
        assert config["headers"] == {}
        assert "keyword" not in config

    def test_relevance_table(self):
        assert relevant_fields("http_keyword") == ("expected_status", "method", "headers", "body", "keyword")
        assert relevant_fields("dns") == ()
        assert not is_actively_probed("push")
        assert is_actively_probed("ping")
