import pytest

from opgate.core.config.settings import Settings, load_settings, resolve_object
from opgate.core.exceptions import SettingsError
from opgate.core.services.validators import PassthroughValidator


def write_yaml(tmp_path, body):
    path = tmp_path / "opgate.yaml"
    path.write_text(body)
    return path


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    s = load_settings(environ={})
    assert s == Settings()
    assert s.timeout_ms == 60_000
    assert s.cancel_on_timeout is False


def test_file_then_env_then_overrides(tmp_path):
    path = write_yaml(
        tmp_path,
        "remote_base_url: https://bb.example.com\n"
        "timeout_ms: 5000\n"
        "log_level: debug\n"
        "critical_components: [RemoteExecutor]\n",
    )
    s = load_settings(
        path,
        environ={"OPGATE_TIMEOUT_MS": "7000", "OPGATE_CANCEL_ON_TIMEOUT": "yes"},
        overrides={"remote_name": "Jira"},
    )
    assert s.remote_base_url == "https://bb.example.com"
    assert s.timeout_ms == 7000
    assert s.cancel_on_timeout is True
    assert s.log_level == "DEBUG"
    assert s.critical_components == ("RemoteExecutor",)
    assert s.remote_name == "Jira"


def test_env_list_parsing(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    s = load_settings(environ={"OPGATE_CRITICAL_COMPONENTS": "A, B,,C"})
    assert s.critical_components == ("A", "B", "C")


def test_default_file_picked_up_from_cwd(monkeypatch, tmp_path):
    write_yaml(tmp_path, "timeout_ms: 2000\n")
    monkeypatch.chdir(tmp_path)
    assert load_settings(environ={}).timeout_ms == 2000


@pytest.mark.parametrize(
    "body",
    [
        "timeout_ms: 10\n",
        "timeout_ms: 500000\n",
        "log_level: chatty\n",
        "remote_base_url: ftp://nope\n",
        "unknown_key: 1\n",
        "timeout_ms: soon\n",
        "- just\n- a list\n",
        "key: [unclosed\n",
    ],
)
def test_invalid_files_rejected(tmp_path, body):
    with pytest.raises(SettingsError):
        load_settings(write_yaml(tmp_path, body), environ={})


def test_missing_explicit_file(tmp_path):
    with pytest.raises(SettingsError, match="not found"):
        load_settings(tmp_path / "absent.yaml", environ={})


def test_programmatic_settings_skip_range_checks():
    assert Settings(timeout_ms=50).timeout_ms == 50


def test_resolve_object_instantiates_classes():
    obj = resolve_object("opgate.core.services.validators:PassthroughValidator")
    assert isinstance(obj, PassthroughValidator)


@pytest.mark.parametrize("ref", ["no_colon", "opgate.nothing_here:X", "opgate.core.services.validators:Nope"])
def test_resolve_object_errors(ref):
    with pytest.raises(SettingsError):
        resolve_object(ref)
