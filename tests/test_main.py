import pytest

from telldus_bridge import main as main_module
from telldus_bridge.core.config import get_settings
from telldus_bridge.core.errors import TelldusBridgeError
from telldus_bridge.services import tdtool as tdtool_module
from telldus_bridge.services.tellstick_conf import TellstickConfError

DEVICE_OUTPUT = "type=device\tid=1\tname=Lamp1\tmodel=selflearning-switch:nexa\tlastsentcommand=ON\n"


class FakeProcess:
    returncode = 0

    def __init__(self, stdout: str) -> None:
        self._stdout = stdout

    async def communicate(self):
        return self._stdout.encode(), b""


@pytest.fixture
def environment(monkeypatch, tmp_path):
    async def fake_exec(*args, **kwargs):
        return FakeProcess(DEVICE_OUTPUT if "--list-devices" in args else "")

    conf_path = tmp_path / "tellstick.conf"
    get_settings.cache_clear()
    monkeypatch.setattr("telldus_bridge.core.config.load_dotenv", lambda: None)
    monkeypatch.setenv("TELLSTICK_CONF", str(conf_path))
    monkeypatch.setattr(tdtool_module.shutil, "which", lambda cmd: f"/usr/bin/{cmd}")
    monkeypatch.setattr(tdtool_module.asyncio, "create_subprocess_exec", fake_exec)
    yield conf_path
    get_settings.cache_clear()


def test_conf_error_is_a_bridge_error():
    assert issubclass(TellstickConfError, TelldusBridgeError)


@pytest.mark.anyio
async def test_main_lists_accessories(environment, capsys):
    assert await main_module.main() == 0

    assert capsys.readouterr().out.startswith("1\tswitch\tLamp1\tnexa\tLightbulb")


@pytest.mark.anyio
async def test_main_reports_malformed_conf(environment, capsys):
    environment.write_text("device {\n  id = 1\n", encoding="utf-8")

    assert await main_module.main() == 1

    assert "Unterminated block" in capsys.readouterr().err
