# SPDX-License-Identifier: Apache-2.0
"""Sensor definition loading."""
from __future__ import annotations

import textwrap

import pytest

from sensor_triggers.config import load_sensor, parse_sensor
from sensor_triggers.policy import Backoff, FieldMatch


def test_load_sensor(tmp_path, monkeypatch):
    monkeypatch.delenv("SENSOR_SECRETS_ROOT", raising=False)
    path = tmp_path / "sensor.yaml"
    path.write_text(
        textwrap.dedent(
            """
            version: 1
            name: billing
            settings:
              secrets_root: /secrets
              default_timeout_s: 5
            triggers:
              - name: bill
                type: gcp_cloud_function
                timeout_s: 2.5
                template:
                  function_name: projects/p/locations/l/functions/billFn
                  credentials_path: gcp/key.json
                parameters:
                  - src: {dependency: order-event, data_key: region, value: eu}
                    dest: function_name
                    operation: append
                payload:
                  - src: {dependency: order-event, data_key: $.amount}
                    dest: $.amount
                policy:
                  allow: [OK]
                  match: {path: result.ok, value: true}
                  retry_on_timeout: true
                  backoff: {steps: 2, duration: 0.5, factor: 3, cap: 1}
              - name: audit
                type: log
            """
        )
    )
    sensor = load_sensor(path)
    assert sensor.name == "billing"
    assert sensor.settings.secrets_root == "/secrets"
    assert sensor.settings.default_timeout_s == 5.0
    bill, audit = sensor.triggers
    assert bill.timeout_s == 2.5
    assert bill.parameters[0].operation == "append"
    assert bill.parameters[0].src.value == "eu"
    assert bill.payload[0].src.data_key == "$.amount"
    assert bill.payload[0].src.has_default is False
    assert bill.policy.allow == ("OK",)
    assert bill.policy.match == FieldMatch(path="result.ok", value=True)
    assert bill.policy.retry_on_timeout is True
    assert bill.policy.backoff == Backoff(steps=2, duration=0.5, factor=3.0, cap=1.0)
    assert audit.type == "log"
    assert audit.payload is None and audit.policy is None


def test_secrets_root_env_override(monkeypatch):
    monkeypatch.setenv("SENSOR_SECRETS_ROOT", "/mnt/secrets")
    sensor = parse_sensor({"settings": {"secrets_root": "/ignored"}})
    assert sensor.settings.secrets_root == "/mnt/secrets"


@pytest.mark.parametrize(
    "raw",
    [
        {"triggers": [{"type": "log"}]},
        {"triggers": [{"name": "a"}, {"name": "a"}]},
        {"triggers": [{"name": "a", "template": ["x"]}]},
        {"triggers": [{"name": "a", "parameters": [{"dest": "x"}]}]},
        {"triggers": [{"name": "a", "parameters": [{"src": {"data_key": "x"}, "dest": "x"}]}]},
        {"triggers": [{"name": "a", "parameters": [{"src": {"dependency": "d"}, "dest": "x", "operation": "merge"}]}]},
    ],
)
def test_invalid_definitions_rejected(raw):
    with pytest.raises(ValueError):
        parse_sensor(raw)


def test_example_sensor_builds_every_trigger():
    from pathlib import Path

    from sensor_triggers.cache import ClientCache
    from sensor_triggers.triggers import build_triggers

    sensor = load_sensor(Path(__file__).resolve().parents[1] / "config" / "sensor.yaml")
    triggers = build_triggers(sensor.triggers, cache=ClientCache(), settings=sensor.settings)
    assert [t.trigger_type for t in triggers.values()] == ["gcp_cloud_function", "http", "log"]
    assert triggers["notify-fulfilment"].policy.retry_on == (429, 503)
