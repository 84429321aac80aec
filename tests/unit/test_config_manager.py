"""Unit tests for configuration loading"""

from pathlib import Path

import pytest

from docextract.services.config_manager import ConfigManager, ConfigValidationError

VALID_CONFIG = """
vertex:
  project_id: ${VERTEX_AI_PROJECT_ID}
  model_id: gemini-2.0-flash-exp
queue:
  max_tokens: 500
  max_rate_limit_retries: 2
batch:
  input_dir: docs
  extensions: [".PDF", "tiff"]
  retry:
    max_attempts: 5
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "docextract.yaml"
    path.write_text(VALID_CONFIG, encoding="utf-8")
    return path


def test_load_valid_config(config_file, monkeypatch):
    monkeypatch.setenv("VERTEX_AI_PROJECT_ID", "acme-prod")

    config = ConfigManager(str(config_file), load_env=False).load_config()

    assert config.vertex.project_id == "acme-prod"
    assert config.queue.max_tokens == 500
    assert config.queue.max_rate_limit_retries == 2
    assert config.queue.max_concurrent_requests == 3
    assert config.batch.input_dir == Path("docs")
    assert config.batch.extensions == ["pdf", "tiff"]
    assert config.batch.retry.max_attempts == 5
    assert config.logging.level == "INFO"


def test_config_cached(config_file, monkeypatch):
    monkeypatch.setenv("VERTEX_AI_PROJECT_ID", "acme-prod")
    manager = ConfigManager(str(config_file), load_env=False)

    assert manager.load_config() is manager.load_config()


def test_unset_variable_rejected(config_file, monkeypatch):
    monkeypatch.delenv("VERTEX_AI_PROJECT_ID", raising=False)

    with pytest.raises(ConfigValidationError, match="project_id"):
        ConfigManager(str(config_file), load_env=False).load_config()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ConfigManager(str(tmp_path / "nope.yaml"), load_env=False).load_config()


def test_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("vertex: [unclosed", encoding="utf-8")

    with pytest.raises(ConfigValidationError, match="YAML"):
        ConfigManager(str(path), load_env=False).load_config()


def test_non_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigValidationError, match="mapping"):
        ConfigManager(str(path), load_env=False).load_config()


def test_out_of_range_value(tmp_path):
    path = tmp_path / "range.yaml"
    path.write_text(
        "vertex:\n  project_id: p\nqueue:\n  max_concurrent_requests: 0\n",
        encoding="utf-8",
    )

    with pytest.raises(ConfigValidationError, match="max_concurrent_requests"):
        ConfigManager(str(path), load_env=False).load_config()


def test_shipped_example_config_is_valid(monkeypatch):
    monkeypatch.setenv("VERTEX_AI_PROJECT_ID", "acme-prod")
    path = Path(__file__).resolve().parents[2] / "config" / "docextract.yaml"

    config = ConfigManager(str(path), load_env=False).load_config()

    assert config.queue.max_tokens == 1_000_000
    assert config.batch.retry.max_attempts == 3
