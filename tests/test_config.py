import pytest

from client import config as client_config
from server import config as server_config


def test_server_config_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("SERVER_PORT", "9100")
    monkeypatch.setenv("SERVER_HISTORY_SIZE", "5")
    config = server_config.load_server_config(str(tmp_path / "missing.env"))
    assert config["port"] == 9100
    assert config["history_size"] == 5
    assert config["host"] == "0.0.0.0"


def test_server_config_from_dotenv(monkeypatch, tmp_path):
    # dotenv writes os.environ directly; register the variable so teardown removes it
    monkeypatch.setenv("SERVER_LOG_LEVEL", "INFO")
    monkeypatch.delenv("SERVER_LOG_LEVEL")
    env_file = tmp_path / ".env"
    env_file.write_text("SERVER_LOG_LEVEL=DEBUG\n")
    config = server_config.load_server_config(str(env_file))
    assert config["log_level"] == "DEBUG"


def test_server_config_rejects_bad_values(monkeypatch, tmp_path):
    monkeypatch.setenv("SERVER_PORT", "not-a-port")
    with pytest.raises(server_config.ConfigError):
        server_config.load_server_config(str(tmp_path / "missing.env"))
    monkeypatch.setenv("SERVER_PORT", "9001")
    monkeypatch.setenv("SERVER_HISTORY_SIZE", "0")
    with pytest.raises(server_config.ConfigError):
        server_config.load_server_config(str(tmp_path / "missing.env"))


def test_client_config_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("CLIENT_SERVER_PORT", "9200")
    monkeypatch.setenv("CLIENT_DISPLAY_NAME", "alice")
    config = client_config.load_config(str(tmp_path / "missing.env"))
    assert config["server_port"] == 9200
    assert config["display_name"] == "alice"


def test_client_config_validates_port(monkeypatch, tmp_path):
    monkeypatch.setenv("CLIENT_SERVER_PORT", "70000")
    with pytest.raises(client_config.ConfigError):
        client_config.load_config(str(tmp_path / "missing.env"))


def test_client_config_rejects_unknown_log_level(monkeypatch, tmp_path):
    monkeypatch.setenv("CLIENT_LOG_LEVEL", "chatty")
    with pytest.raises(client_config.ConfigError):
        client_config.load_config(str(tmp_path / "missing.env"))


def test_client_main_reports_bad_configuration(monkeypatch, capsys):
    from client.main import main

    monkeypatch.setenv("CLIENT_LOG_LEVEL", "chatty")
    assert main(["--env-file", "does-not-exist.env"]) == 2
    assert "Invalid configuration" in capsys.readouterr().err
