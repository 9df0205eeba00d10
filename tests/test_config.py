from pathlib import Path

from travel_planner.config import load_config


def test_defaults_are_loaded_from_packaged_yaml():
    config = load_config(env={})

    assert config.server.port == 3000
    assert config.open_meteo.forecast_url == "https://api.open-meteo.com/v1"
    assert config.open_meteo.forecast_days == 7
    assert config.logging.level == "INFO"


def test_config_file_is_merged_over_defaults(tmp_path: Path):
    override = tmp_path / "local.yaml"
    override.write_text("open_meteo:\n  timeout_seconds: 2.5\nlogging:\n  json: false\n")

    config = load_config(env={"TRAVEL_PLANNER_CONFIG_PATH": str(override)})

    assert config.open_meteo.timeout_seconds == 2.5
    assert config.open_meteo.max_attempts == 3
    assert config.logging.json is False


def test_environment_overrides():
    config = load_config(
        env={
            "TRAVEL_PLANNER_PORT": "8080",
            "TRAVEL_PLANNER_FORECAST_URL": "http://localhost:9000/v1",
            "TRAVEL_PLANNER_REQUEST_TIMEOUT": "3",
            "TRAVEL_PLANNER_LOG_LEVEL": "debug",
            "TRAVEL_PLANNER_LOG_JSON": "no",
        }
    )

    assert config.server.port == 8080
    assert config.open_meteo.forecast_url == "http://localhost:9000/v1"
    assert config.open_meteo.timeout_seconds == 3.0
    assert config.logging.level == "debug"
    assert config.logging.json is False


def test_invalid_numeric_override_is_ignored():
    config = load_config(env={"TRAVEL_PLANNER_PORT": "not-a-port"})

    assert config.server.port == 3000
