from pathlib import Path

import pytest

from common.config import Secrets, load_config, load_yaml_config
from common.errors import ConfigError

REPO_CONFIG = Path(__file__).resolve().parent.parent / "config" / "config.yaml"


def _write(tmp_path, body):
    path = tmp_path / "config.yaml"
    path.write_text(body)
    return path


def test_shipped_config_is_valid():
    cfg = load_yaml_config(REPO_CONFIG)
    assert cfg.chunking.chunk_size == 1000
    assert cfg.retrieval.k == 5
    assert cfg.app.allowed_exts == (".pdf", ".txt", ".md")


def test_defaults_fill_missing_sections(tmp_path):
    cfg = load_yaml_config(_write(tmp_path, "app:\n  database_url: sqlite:///x.db\n"))
    assert cfg.embeddings.provider == "ollama"
    assert cfg.chunking.mode == "recursive"
    assert cfg.llm_qa.model_name == "mistral"


def test_missing_file_is_config_error(tmp_path):
    with pytest.raises(ConfigError):
        load_yaml_config(tmp_path / "absent.yaml")


def test_invalid_values_are_config_error(tmp_path):
    with pytest.raises(ConfigError):
        load_yaml_config(_write(tmp_path, "retrieval:\n  k: 0\n"))
    with pytest.raises(ConfigError):
        load_yaml_config(_write(tmp_path, "embeddings:\n  provider: telepathy\n"))


def test_malformed_yaml_is_config_error(tmp_path):
    with pytest.raises(ConfigError):
        load_yaml_config(_write(tmp_path, "app: [unclosed\n"))


def test_environment_database_url_wins(tmp_path):
    path = _write(tmp_path, "app:\n  database_url: sqlite:///from_yaml.db\n")
    cfg = load_config(
        path,
        secrets=Secrets(database_url="sqlite:///from_env.db", ollama_base_url="http://ollama:11434"),
    )
    assert cfg.app.database_url == "sqlite:///from_env.db"
    assert cfg.ollama_base_url == "http://ollama:11434"


def test_database_url_from_yaml_when_env_unset(tmp_path):
    path = _write(tmp_path, "app:\n  database_url: sqlite:///from_yaml.db\n")
    cfg = load_config(path, secrets=Secrets(database_url=None))
    assert cfg.app.database_url == "sqlite:///from_yaml.db"


def test_missing_database_url_is_config_error(tmp_path):
    path = _write(tmp_path, "retrieval:\n  k: 3\n")
    with pytest.raises(ConfigError, match="DATABASE_URL"):
        load_config(path, secrets=Secrets(database_url=None))


def test_non_positive_pdf_page_limit_is_config_error(tmp_path):
    with pytest.raises(ConfigError):
        load_yaml_config(_write(tmp_path, "app:\n  max_pdf_pages: 0\n"))
