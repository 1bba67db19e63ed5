import json
from datetime import datetime, timezone

import pytest

from instant_ink import main as cli
from instant_ink.models.config import PersistedConfig
from instant_ink.models.printer import PrinterReading
from instant_ink.services.config_service import ConfigService
from instant_ink.utils.config import InstantInkSettings
from instant_ink.utils.exceptions import ParsingError, PrinterNetworkError

READING = PrinterReading(
    timestamp=datetime(2024, 1, 15, 12, 30, 0, tzinfo=timezone.utc),
    pages_printed=1234,
    subscription_impressions=321,
    colour_ink_level=64,
    black_ink_level=15,
)


@pytest.fixture()
def fetch_calls(monkeypatch: pytest.MonkeyPatch) -> list:
    """Replace the network fetch with a stub returning READING."""
    calls = []

    async def fake_fetch(printer_url: str, timeout_seconds: int) -> PrinterReading:
        calls.append((printer_url, timeout_seconds))
        return READING

    monkeypatch.setattr(cli, "fetch_reading", fake_fetch)
    return calls


def _raise_from_fetch(monkeypatch: pytest.MonkeyPatch, error: Exception) -> None:
    async def fake_fetch(printer_url: str, timeout_seconds: int) -> PrinterReading:
        raise error

    monkeypatch.setattr(cli, "fetch_reading", fake_fetch)


class TestQuery:
    def test_table_output(self, fetch_calls: list, capsys: pytest.CaptureFixture) -> None:
        assert cli.main(["--printer", "192.168.1.13"]) == 0
        out, err = capsys.readouterr()
        assert "Total Pages" in out and "1234" in out
        assert "LOW BLACK INK: 15% remaining" in err
        assert fetch_calls == [("http://192.168.1.13/DevMgmt/ProductUsageDyn.xml", 30)]

    def test_json_output(self, fetch_calls: list, capsys: pytest.CaptureFixture) -> None:
        assert cli.main(["-p", "printer.local", "--format", "json"]) == 0
        out, _ = capsys.readouterr()
        data = json.loads(out)
        assert data["pages_printed"] == 1234
        assert data["black_ink_level"] == 15

    def test_timeout_flag(self, fetch_calls: list) -> None:
        assert cli.main(["-p", "printer.local", "--timeout", "7"]) == 0
        assert fetch_calls[0][1] == 7

    def test_uses_stored_printer_and_timeout(self, fetch_calls: list,
                                             isolated_settings: InstantInkSettings) -> None:
        ConfigService(isolated_settings.config_path).save(
            PersistedConfig(printer_url="http://stored/DevMgmt/ProductUsageDyn.xml", timeout_seconds=9)
        )
        assert cli.main([]) == 0
        assert fetch_calls == [("http://stored/DevMgmt/ProductUsageDyn.xml", 9)]

    def test_printer_flag_overrides_stored_default(self, fetch_calls: list,
                                                   isolated_settings: InstantInkSettings) -> None:
        ConfigService(isolated_settings.config_path).save(
            PersistedConfig(printer_url="http://stored/DevMgmt/ProductUsageDyn.xml")
        )
        assert cli.main(["--printer", "https://other/"]) == 0
        assert fetch_calls[0][0] == "https://other/DevMgmt/ProductUsageDyn.xml"

    def test_missing_printer_exits_nonzero(self, fetch_calls: list) -> None:
        assert cli.main([]) == 1
        assert fetch_calls == []

    def test_network_error_exits_nonzero(self, monkeypatch: pytest.MonkeyPatch,
                                         capsys: pytest.CaptureFixture) -> None:
        _raise_from_fetch(monkeypatch, PrinterNetworkError("http://p/DevMgmt/ProductUsageDyn.xml", "refused"))
        assert cli.main(["-p", "p"]) == 1
        assert capsys.readouterr().out == ""

    def test_parsing_error_exits_nonzero(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _raise_from_fetch(monkeypatch, ParsingError("no consumables"))
        assert cli.main(["-p", "p"]) == 1

    def test_broken_config_file_exits_nonzero(self, fetch_calls: list,
                                              isolated_settings: InstantInkSettings) -> None:
        isolated_settings.config_path.parent.mkdir(parents=True)
        isolated_settings.config_path.write_text("{", encoding="utf-8")
        assert cli.main(["-p", "p"]) == 1
        assert fetch_calls == []

    def test_invalid_environment_exits_nonzero(self, monkeypatch: pytest.MonkeyPatch,
                                               capsys: pytest.CaptureFixture) -> None:
        monkeypatch.setenv("INSTANT_INK_LOW_INK_THRESHOLD", "lots")
        monkeypatch.setattr(cli, "get_settings", InstantInkSettings)
        assert cli.main(["-p", "p"]) == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_rejects_non_positive_timeout(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["-p", "p", "--timeout", "0"])
        assert exc_info.value.code == 2


class TestConfigCommand:
    def test_set_printer_normalizes_and_saves(self, isolated_settings: InstantInkSettings,
                                              capsys: pytest.CaptureFixture) -> None:
        assert cli.main(["config", "--set-printer", "192.168.1.13"]) == 0
        config = ConfigService(isolated_settings.config_path).load()
        assert config.printer_url == "http://192.168.1.13/DevMgmt/ProductUsageDyn.xml"
        assert config.last_updated is not None
        out = capsys.readouterr().out
        assert "Set default printer: http://192.168.1.13/DevMgmt/ProductUsageDyn.xml" in out
        assert "Configuration saved" in out

    def test_set_timeout(self, isolated_settings: InstantInkSettings) -> None:
        assert cli.main(["config", "--set-timeout", "45"]) == 0
        assert ConfigService(isolated_settings.config_path).load().timeout_seconds == 45

    def test_set_both_in_one_call(self, isolated_settings: InstantInkSettings) -> None:
        assert cli.main(["config", "--set-printer", "p", "--set-timeout", "5"]) == 0
        config = ConfigService(isolated_settings.config_path).load()
        assert config.printer_url == "http://p/DevMgmt/ProductUsageDyn.xml"
        assert config.timeout_seconds == 5

    def test_show(self, isolated_settings: InstantInkSettings, capsys: pytest.CaptureFixture) -> None:
        cli.main(["config", "--set-printer", "p"])
        capsys.readouterr()
        assert cli.main(["config", "--show"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("Current configuration:\n")
        shown = json.loads(out.split("\n", 1)[1])
        assert shown["printer_url"] == "http://p/DevMgmt/ProductUsageDyn.xml"

    def test_show_does_not_create_file(self, isolated_settings: InstantInkSettings) -> None:
        assert cli.main(["config", "--show"]) == 0
        assert not isolated_settings.config_path.exists()

    def test_reset(self, isolated_settings: InstantInkSettings) -> None:
        cli.main(["config", "--set-printer", "p", "--set-timeout", "5"])
        assert cli.main(["config", "--reset"]) == 0
        config = ConfigService(isolated_settings.config_path).load()
        assert config.printer_url == ""
        assert config.timeout_seconds == 30

    def test_no_options(self, isolated_settings: InstantInkSettings, capsys: pytest.CaptureFixture) -> None:
        assert cli.main(["config"]) == 0
        assert "No configuration changes made" in capsys.readouterr().out
        assert not isolated_settings.config_path.exists()
