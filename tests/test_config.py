import json

import pytest

from drainbench.config import DEFAULT_CONFIGS, DEFAULT_TOTAL_SIZE, ConfigError, RunConfig, load_configs


def test_defaults():
    c = RunConfig(chunk_size=4096)
    assert c.total_size == DEFAULT_TOTAL_SIZE == 1024 ** 3
    assert c.pacing == "none"
    assert not c.report
    assert c.chunk_count == 262144


def test_default_list_is_valid():
    for c in DEFAULT_CONFIGS:
        c.validate()
    assert [c.pacing for c in DEFAULT_CONFIGS] == ["none", "drain", "delay"]


def test_config_is_immutable():
    c = RunConfig(chunk_size=4096)
    with pytest.raises(AttributeError):
        c.chunk_size = 1


@pytest.mark.parametrize("kwargs, message", [
    ({"chunk_size": 1024, "total_size": 1000}, "not divisible"),
    ({"chunk_size": 0, "total_size": 1000}, "chunk_size"),
    ({"chunk_size": 1024, "total_size": 0}, "total_size"),
    ({"chunk_size": 1024, "total_size": 2048, "pacing": "sometimes"}, "unknown pacing"),
    ({"chunk_size": 1024, "total_size": 2048, "pacing": "delay", "delay_ms": -1}, "delay_ms"),
    ({"chunk_size": "4096", "total_size": 16384}, "chunk_size must be an integer"),
    ({"chunk_size": 1.5, "total_size": 3}, "chunk_size must be an integer"),
    ({"chunk_size": 1024, "total_size": 2048.0}, "total_size must be an integer"),
    ({"chunk_size": True, "total_size": 2}, "chunk_size must be an integer"),
    ({"chunk_size": 1024, "total_size": 2048, "pacing": "delay", "delay_ms": "5"}, "delay_ms must be a number"),
    ({"chunk_size": 1024, "total_size": 2048, "report": "yes"}, "report must be"),
])
def test_validate_rejects(kwargs, message):
    with pytest.raises(ConfigError, match=message):
        RunConfig(**kwargs).validate()


def test_config_error_is_value_error():
    with pytest.raises(ValueError):
        RunConfig(chunk_size=3, total_size=10).validate()


def test_describe_drops_unused_delay():
    assert "delay_ms" not in RunConfig(chunk_size=4096, pacing="drain").describe()
    d = RunConfig(chunk_size=4096, pacing="delay", delay_ms=2.5).describe()
    assert d["delay_ms"] == 2.5
    assert d["chunk_size"] == 4096


def test_load_configs(tmp_path):
    path = tmp_path / "runs.json"
    path.write_text(json.dumps([
        {"chunk_size": 4096, "total_size": 16384},
        {"chunk_size": 1024, "total_size": 1000, "pacing": "drain", "report": True},
    ]))
    configs = load_configs(str(path))
    assert configs == [
        RunConfig(chunk_size=4096, total_size=16384),
        RunConfig(chunk_size=1024, total_size=1000, pacing="drain", report=True),
    ]


@pytest.mark.parametrize("content, message", [
    ('{"chunk_size": 4096}', "expected a list"),
    ('[{"chunk_size": 4096, "colour": "red"}]', "unknown keys"),
    ('[{"total_size": 4096}]', "missing chunk_size"),
    ('[4096]', "not an object"),
    ('[{', "invalid JSON"),
])
def test_load_configs_rejects_malformed(tmp_path, content, message):
    path = tmp_path / "runs.json"
    path.write_text(content)
    with pytest.raises(ConfigError, match=message):
        load_configs(str(path))


@pytest.mark.parametrize("entry", [
    {"chunk_size": "4096", "total_size": 16384},
    {"chunk_size": 1.5, "total_size": 3},
    {"chunk_size": 1024, "total_size": 2048, "report": 1},
])
def test_loaded_configs_with_wrong_types_fail_validation(tmp_path, entry):
    path = tmp_path / "runs.json"
    path.write_text(json.dumps([entry]))
    config, = load_configs(str(path))
    with pytest.raises(ConfigError):
        config.validate()


def test_integral_delay_is_accepted():
    RunConfig(chunk_size=1024, total_size=2048, pacing="delay", delay_ms=5).validate()
