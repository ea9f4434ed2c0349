from datetime import date, datetime

from xpath_reader import core
from xpath_reader.context import Context
from xpath_reader.helpers.casting import ensure_date, ensure_datetime
from xpath_reader.reader import Reader
from xpath_reader.settings import Settings


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("XPATH_READER_EMPTY_AS_ABSENT", raising=False)
    settings = Settings()
    assert settings.debug is False
    assert settings.resolve_entities is False
    assert settings.empty_as_absent is False
    assert settings.context_path is None


def test_settings_env(monkeypatch, tmp_path):
    monkeypatch.setenv("XPATH_READER_EMPTY_AS_ABSENT", "true")
    monkeypatch.setenv("XPATH_READER_CONTEXT_PATH", str(tmp_path / "context.yml"))
    settings = Settings()
    assert settings.empty_as_absent is True
    assert settings.context_path == tmp_path / "context.yml"


def test_get_settings_cached():
    assert core.get_settings() is core.get_settings()


def test_default_context_is_copied(mocker):
    configured = Context({"atom": "http://www.w3.org/2005/Atom"})
    mocker.patch.object(core, "_get_configured_context", return_value=configured)
    first = core.get_default_context()
    second = core.get_default_context()
    assert first is not configured
    assert first is not second
    assert first.namespaces["atom"] == "http://www.w3.org/2005/Atom"


def test_reader_settings(mocker):
    mocker.patch(
        "xpath_reader.reader.get_settings",
        return_value=Settings(empty_as_absent=True),
    )
    reader = Reader.from_string("<root><empty/></root>")
    assert reader.empty_as_absent is True
    assert reader.read_option("//empty") is None


def test_blank_text(mocker):
    mocker.patch(
        "xpath_reader.reader.get_settings",
        return_value=Settings(remove_blank_text=True),
    )
    reader = Reader.from_string("<root>\n  <a>1</a>\n  <a>2</a>\n</root>")
    assert reader.read_vec("/root/text()") == []


def test_init_logging(mocker):
    configure = mocker.patch.object(core, "configure_logging")
    core.init_xpath_reader()
    assert configure.call_count == 1


class TestCasting:
    def test_ensure_date(self):
        assert ensure_date("2024-01-15") == date(2024, 1, 15)
        assert ensure_date("2024-01-15T10:30:00") == date(2024, 1, 15)
        assert ensure_date("15 January 2024") == date(2024, 1, 15)
        assert ensure_date("   ") is None

    def test_ensure_datetime(self):
        assert ensure_datetime("2024-01-15T10:30:00") == datetime(2024, 1, 15, 10, 30)
        parsed = ensure_datetime("Mon, 15 Jan 2024 10:30:00 GMT")
        assert parsed.year == 2024
        assert parsed.hour == 10
        assert ensure_datetime("") is None

    def test_partial_dates_rejected(self):
        assert ensure_date("March") is None
        assert ensure_date("15 March") is None
        assert ensure_datetime("42") is None
        assert ensure_datetime("March 2024 10:30") is None
