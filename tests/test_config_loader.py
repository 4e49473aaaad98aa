import json
import os
from pathlib import Path
from typing import Dict

import pytest
import yaml

from sqs_alarms import config_loader, core


def _missing_conf_message_data():
    conf = [
        {"sqs-alarms": {}},
        {"sqs-alarms": {"alarms": [{"topic": "t", "thresholds": [1]}]}},
        {"sqs-alarms": {"alarms": [{"queue": "q", "thresholds": [1]}]}},
        {"sqs-alarms": {"alarms": [{"queue": "q", "topic": "t"}]}},
        {"sqs-alarms": {"alarms": [{"queue": "q", "topic": "t", "thresholds": [{"period": 60}]}]}},
        {"custom": {"sqs-alarms": {"alarms": [{"queue": "q", "topic": "t", "thresholds": ["1"]}]}}},
        {"sqs-alarms": {"alarms": [], "stages": "prod"}},
    ]
    # note: these portions of error messages may modified in a new version of libs.
    words = [
        ("alarms",),
        ("queue",),
        ("topic",),
        ("thresholds",),
        ("period", "value"),  # depends on which branch of `oneOf` is reported
        ("'1'",),
        ("array",),
    ]

    return zip(conf, words)


@pytest.mark.parametrize("conf, words_in_message", _missing_conf_message_data())
def test_insufficient_config(tmp_path: Path, conf: Dict, words_in_message: tuple):
    """Tests invalid settings"""
    config_path = tmp_path / "config_missing_key.json"
    with open(config_path, "w") as f:
        json.dump(conf, f)

    with pytest.raises(Exception) as e:
        # execute test
        config_loader.load(str(config_path))

    assert any(w in e.value.message for w in words_in_message)  # type: ignore


def test_load_default_config(tmp_path: Path):
    """Tests loading settings without optional keys"""
    alarms = [{"queue": "q", "topic": "t", "thresholds": [1]}]
    config_path = tmp_path / "config.json"

    with open(config_path, "w") as f:
        json.dump({"sqs-alarms": {"alarms": alarms}}, f)

    loaded_conf = config_loader.load(str(config_path))

    assert loaded_conf == {"alarms": alarms}
    assert "stages" not in loaded_conf  # type: ignore


def test_load_custom_section(tmp_path: Path):
    """Tests settings under `custom` are preferred"""
    conf = {
        "service": "my-service",
        "custom": {
            "sqs-alarms": {
                "stages": ["prod"],
                "alarms": [{"queue": "custom-q", "topic": "t", "thresholds": [1]}],
            },
        },
        "sqs-alarms": {
            "alarms": [{"queue": "top-level-q", "topic": "t", "thresholds": [1]}],
        },
    }
    config_path = tmp_path / "serverless.yml"

    with open(config_path, "w") as f:
        yaml.safe_dump(conf, f)

    loaded_conf = config_loader.load(str(config_path))

    assert loaded_conf["stages"] == ["prod"]  # type: ignore
    assert loaded_conf["alarms"][0]["queue"] == "custom-q"  # type: ignore


def test_no_settings(tmp_path: Path):
    """Tests a config without `sqs-alarms` settings"""
    config_path = tmp_path / "config.yaml"

    with open(config_path, "w") as f:
        yaml.safe_dump({"service": "my-service", "custom": {"other-plugin": {}}}, f)

    assert config_loader.load(str(config_path)) is None


def test_invalid_treatment_passes_schema(tmp_path: Path):
    """Tests unknown missing data treatments are left to the compiler"""
    alarm = {"queue": "q", "topic": "t", "thresholds": [1, 2], "treatMissingData": ["invalid", "ignore"]}
    config_path = tmp_path / "config.json"

    with open(config_path, "w") as f:
        json.dump({"sqs-alarms": {"alarms": [alarm]}}, f)

    loaded_conf = config_loader.load(str(config_path))
    assert loaded_conf["alarms"] == [alarm]  # type: ignore


@pytest.mark.parametrize("config_file", ["config.yaml", "config.yml"])
def test_conf_in_yaml(tmp_path: Path, config_file: str):
    """Tests yaml config"""
    settings = {
        "stages": ["dev", "prod"],
        "alarms": [
            {
                "queue": "q1",
                "topic": "t1",
                "name": "alarm",
                "okAlerts": False,
                "thresholds": [1, {"value": 2, "namespace": "ns", "period": 300, "evaluationPeriods": 3}],
            },
            {
                "queue": "q2",
                "topic": "t2",
                "treatMissingData": "notBreaching",
                "thresholds": [10.5],
            },
        ],
    }

    config_path = tmp_path / config_file

    with open(config_path, "w") as f:
        yaml.safe_dump({"sqs-alarms": settings}, f)

    loaded_conf = config_loader.load(str(config_path))
    assert settings == loaded_conf


def test_default_conf_filename(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Tests resolving default config filename"""

    def _conf(filename: str):
        return {
            "sqs-alarms": {
                "alarms": [{"queue": filename, "topic": "t", "thresholds": [1]}],
            },
        }

    prioritized_filenames: list[str] = [
        "sqs-alarms.yaml",
        "sqs-alarms.yml",
        "sqs-alarms.json",
    ]  # prioritized order

    monkeypatch.chdir(tmp_path)

    for filename in prioritized_filenames:
        conf = _conf(filename)

        config_path = tmp_path / filename
        with open(config_path, "w") as f:
            if filename.endswith(".json"):
                json.dump(conf, f)
            else:
                yaml.safe_dump(conf, f)

    for filename in prioritized_filenames:
        # load without filename
        loaded_conf = config_loader.load(None)
        assert loaded_conf["alarms"][0]["queue"] == filename  # type: ignore
        os.remove(tmp_path / filename)


def test_file_not_found(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Tests config file not found"""
    monkeypatch.chdir(tmp_path)

    with pytest.raises(FileNotFoundError) as err:
        config_loader.load("no_such_config.json")
    assert "no_such_config.json" in str(err.value)

    with pytest.raises(ValueError) as err2:
        config_loader.load(None)
    assert "-c" in str(err2.value)


def test_null_stages(tmp_path: Path):
    """Tests `stages` without items means every stage"""
    config_path = tmp_path / "config.yml"

    with open(config_path, "w") as f:
        f.write("sqs-alarms:\n  stages:\n  alarms:\n    - queue: q\n      topic: t\n      thresholds: [1]\n")

    loaded_conf = config_loader.load(str(config_path))

    assert loaded_conf["stages"] is None  # type: ignore
    assert core.should_deploy(loaded_conf, "dev")  # type: ignore


def test_get_schema():
    """Tests the bundled schema"""
    schema = config_loader.get_schema()

    assert schema["required"] == ["alarms"]
    assert schema["definitions"]["alarm"]["required"] == ["queue", "topic", "thresholds"]
