from __future__ import annotations

import sys
import types

import pytest

from jenkinsfn.core.runtime.settings import Settings, load_settings


def test_from_env_reads_snapshot_only():
    s = Settings.from_env(
        {
            "JENKINSFN_OUTPUT_ROOT": "/tmp/gen",
            "JENKINSFN_NAMESPACE": "org.example",
            "JENKINSFN_REGISTRY_TIMESTAMP": "false",
            "JENKINSFN_LOG_FORMAT": "json",
        }
    )
    assert s.output_root == "/tmp/gen"
    assert s.namespace == "org.example"
    assert s.registry_timestamp is False
    assert s.module_strict is True
    assert s.log_format == "json"
    assert s.registry_file == "steps.properties"


def test_load_settings_layers_module_and_overrides(monkeypatch):
    mod = types.ModuleType("jenkinsfn_test_settings")
    mod.SETTINGS = {"namespace": "from.module", "descriptor_suffix": ".desc"}
    monkeypatch.setitem(sys.modules, "jenkinsfn_test_settings", mod)

    s = load_settings(
        {"descriptor_suffix": ".override"},
        env={"JENKINSFN_SETTINGS_MODULE": "jenkinsfn_test_settings", "JENKINSFN_NAMESPACE": "from.env"},
    )
    assert s.namespace == "from.module"
    assert s.descriptor_suffix == ".override"


def test_settings_module_must_expose_dict(monkeypatch):
    mod = types.ModuleType("jenkinsfn_bad_settings")
    mod.SETTINGS = ["nope"]
    monkeypatch.setitem(sys.modules, "jenkinsfn_bad_settings", mod)
    with pytest.raises(TypeError):
        load_settings(env={"JENKINSFN_SETTINGS_MODULE": "jenkinsfn_bad_settings"})
