"""Tests for the Config class."""

import logging
import os
from importlib import reload
from pathlib import Path
from unittest.mock import call, patch

import pytest

from bankrag import config as config_module
from bankrag.config import Config


def test_get_openai_api_key_from_env():
    with patch.dict(os.environ, {"OPENAI_API_KEY": "test-api-key"}):
        assert Config.get_openai_api_key() == "test-api-key"


def test_get_gemini_api_key_empty_when_not_set():
    with patch.dict(os.environ, {}, clear=True):
        assert not Config.get_gemini_api_key()


def test_validate_passes_for_local_defaults():
    with (
        patch.object(Config, "EMBEDDING_PROVIDER", "local"),
        patch.object(Config, "LLM_PROVIDER", "mock"),
        patch.object(Config, "get_openai_api_key", return_value=""),
    ):
        Config.validate()


@pytest.mark.parametrize(
    ("embedding_provider", "llm_provider"),
    [("openai", "mock"), ("local", "openai")],
)
def test_validate_requires_openai_key(embedding_provider, llm_provider):
    with (
        patch.object(Config, "EMBEDDING_PROVIDER", embedding_provider),
        patch.object(Config, "LLM_PROVIDER", llm_provider),
        patch.object(Config, "get_openai_api_key", return_value=""),
        pytest.raises(ValueError, match="OPENAI_API_KEY is required"),
    ):
        Config.validate()


def test_validate_requires_gemini_key():
    with (
        patch.object(Config, "EMBEDDING_PROVIDER", "local"),
        patch.object(Config, "LLM_PROVIDER", "gemini"),
        patch.object(Config, "get_gemini_api_key", return_value=""),
        pytest.raises(ValueError, match="GEMINI_API_KEY is required"),
    ):
        Config.validate()


@pytest.mark.parametrize(
    ("env_var", "default_value", "test_value", "expected"),
    [
        ("EMBEDDING_PROVIDER", "local", "OpenAI", "openai"),
        ("EMBEDDING_DIMENSION", 384, "1536", 1536),
        ("LLM_PROVIDER", "mock", "Ollama", "ollama"),
        ("LLM_TEMPERATURE", 0.3, "0.7", 0.7),
        ("RETRIEVAL_TOP_K", 5, "8", 8),
        ("SIMILARITY_THRESHOLD", 0.3, "0.1", 0.1),
        ("CONVERSATION_WINDOW", 6, "10", 10),
        ("VECTOR_BACKEND", "sqlite", "FAISS", "faiss"),
        ("CHUNK_SIZE", 1000, "1500", 1500),
        ("LOG_LEVEL", "INFO", "debug", "DEBUG"),
    ],
)
def test_config_loading_from_env(env_var, default_value, test_value, expected):
    with patch.dict(os.environ, {}, clear=True):
        reload(config_module)
        assert getattr(config_module.Config, env_var) == default_value

    with patch.dict(os.environ, {env_var: test_value}):
        reload(config_module)
        assert getattr(config_module.Config, env_var) == expected

    reload(config_module)


@pytest.mark.parametrize(
    "env_var",
    ["VECTOR_STORE_DB_PATH", "FAISS_INDEX_PATH", "CONVERSATION_DB_PATH", "POLICY_DIR"],
)
def test_path_config_loading(env_var):
    with patch.dict(os.environ, {env_var: "/custom/location"}):
        reload(config_module)
        actual_path = getattr(config_module.Config, env_var)
        assert actual_path == Path("/custom/location")

    reload(config_module)


@pytest.mark.parametrize(
    ("log_level", "expected_level"),
    [("INFO", logging.INFO), ("DEBUG", logging.DEBUG), ("INVALID", logging.INFO)],
)
def test_setup_logging_levels(log_level, expected_level):
    with (
        patch.object(Config, "LOG_LEVEL", log_level),
        patch.object(Config, "OPENAI_LOG_LEVEL", "ERROR"),
        patch.object(Config, "HTTPX_LOG_LEVEL", "WARNING"),
        patch("bankrag.config.logging.basicConfig") as mock_basic,
        patch("bankrag.config.logging.getLogger") as mock_get_logger,
    ):
        Config.setup_logging()

        mock_basic.assert_called_once_with(
            level=expected_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        mock_get_logger.assert_has_calls([call("openai"), call("httpx")], any_order=True)


def test_type_conversion_errors():
    with (
        patch.dict(os.environ, {"RETRIEVAL_TOP_K": "many"}),
        pytest.raises(ValueError, match="invalid literal for int"),
    ):
        reload(config_module)

    reload(config_module)


@pytest.mark.parametrize(
    ("backend", "expected_path"),
    [("sqlite", Path("data/bankrag.db")), ("faiss", Path("data/faiss/bankrag.db"))],
)
def test_vector_store_path_defaults_per_backend(backend, expected_path):
    with patch.dict(os.environ, {"VECTOR_BACKEND": backend}, clear=True):
        reload(config_module)
        assert config_module.Config.VECTOR_STORE_DB_PATH == expected_path

    reload(config_module)
