import pytest

from telldus_bridge.core.config import get_settings, load_platform_config


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_settings_defaults(monkeypatch):
    for name in ("TDTOOL_COMMAND", "TELLSTICK_CONF", "SENSOR_MAX_AGE_SECONDS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("telldus_bridge.core.config.load_dotenv", lambda: None)

    settings = get_settings()

    assert settings.tdtool_command == "tdtool"
    assert settings.tellstick_conf == "/etc/tellstick.conf"
    assert settings.sensor_max_age_seconds == 600
    assert settings.log_level == "INFO"


def test_settings_from_environment(monkeypatch):
    monkeypatch.setattr("telldus_bridge.core.config.load_dotenv", lambda: None)
    monkeypatch.setenv("TDTOOL_COMMAND", "/opt/telldus/bin/tdtool")
    monkeypatch.setenv("SENSOR_MAX_AGE_SECONDS", "120")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.tdtool_command == "/opt/telldus/bin/tdtool"
    assert settings.sensor_max_age_seconds == 120
    assert settings.log_level == "DEBUG"


def test_invalid_environment(monkeypatch):
    monkeypatch.setattr("telldus_bridge.core.config.load_dotenv", lambda: None)
    monkeypatch.setenv("SENSOR_MAX_AGE_SECONDS", "ten minutes")

    with pytest.raises(RuntimeError):
        get_settings()


def test_platform_config_static_sensors():
    config = load_platform_config({"sensors": [{"id": 5}, {"id": 6, "name": "Garage"}]})

    assert [sensor.name for sensor in config.sensors] == ["Sensor 5", "Garage"]
    assert config.sensors[0].as_record() == {
        "type": "sensor",
        "id": 5,
        "name": "Sensor 5",
        "model": "temperature",
    }


def test_platform_config_defaults_and_errors():
    assert load_platform_config(None).sensors == []
    with pytest.raises(RuntimeError):
        load_platform_config({"sensors": [{"name": "no id"}]})
