"""Unit tests for config_template module."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from src.greenhouse.runtime.config.config_template import (
    apply_environment_overrides,
    load_templated_yaml,
    substitute_env_vars,
)


class TestSubstituteEnvVars:
    def test_substitute_simple_env_var(self):
        with patch.dict(os.environ, {"TEST_VAR": "test_value"}):
            assert substitute_env_vars("${TEST_VAR}") == "test_value"

    def test_substitute_env_var_in_text(self):
        with patch.dict(os.environ, {"HOST": "localhost", "PORT": "3000"}):
            result = substitute_env_vars("Server running at http://${HOST}:${PORT}/")
            assert result == "Server running at http://localhost:3000/"

    def test_default_used_when_missing(self):
        with patch.dict(os.environ, {}, clear=True):
            assert substitute_env_vars("${MISSING_VAR:-default_value}") == "default_value"

    def test_default_ignored_when_set(self):
        with patch.dict(os.environ, {"PRESENT_VAR": "actual_value"}):
            assert substitute_env_vars("${PRESENT_VAR:-default_value}") == "actual_value"

    def test_empty_default(self):
        with patch.dict(os.environ, {}, clear=True):
            assert substitute_env_vars("${MISSING_VAR:-}") == ""

    def test_required_env_var_missing(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(
                ValueError, match="Required environment variable MISSING_VAR not set"
            ):
                substitute_env_vars("${MISSING_VAR}")

    def test_required_env_var_custom_message(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="set the Stripe key"):
                substitute_env_vars("${STRIPE_KEY:?set the Stripe key}")


class TestEnvironmentOverrides:
    def test_prefixed_variable_is_promoted(self):
        with patch.dict(
            os.environ,
            {"STAGING_DATABASE_URL": "sqlite:///staging.db", "DATABASE_URL": "sqlite://"},
        ):
            apply_environment_overrides("staging")
            assert os.environ["DATABASE_URL"] == "sqlite:///staging.db"


class TestLoadTemplatedYaml:
    def _write(self, tmp_path: Path, content: str) -> Path:
        path = tmp_path / "config.yaml"
        path.write_text(content)
        return path

    def test_loads_sections(self, tmp_path: Path):
        path = self._write(
            tmp_path,
            """
config:
  app:
    port: ${SHOP_PORT:-4000}
    client_domain: https://shop.example.com
  payments:
    stripe_secret_key: sk_test_abc
    currency: eur
  identity:
    project_id: my-shop
""",
        )
        with patch.dict(os.environ, {}, clear=True):
            config = load_templated_yaml(path, env_mode="development")

        assert config.app.port == 4000
        assert config.app.client_domain == "https://shop.example.com"
        assert config.payments.currency == "eur"
        assert config.identity.expected_issuer == "https://securetoken.google.com/my-shop"
        assert config.identity.expected_audiences == ["my-shop"]

    def test_list_valued_substitution(self, tmp_path: Path):
        path = self._write(
            tmp_path,
            "config:\n  jwt:\n    allowed_algorithms: ${ALGS:-[RS256]}\n",
        )
        with patch.dict(os.environ, {"ALGS": "[RS256, HS256]"}, clear=True):
            config = load_templated_yaml(path)
        assert config.jwt.allowed_algorithms == ["RS256", "HS256"]

    def test_empty_file_rejected(self, tmp_path: Path):
        path = self._write(tmp_path, "")
        with pytest.raises(ValueError, match="is empty"):
            load_templated_yaml(path)

    def test_invalid_values_rejected(self, tmp_path: Path):
        path = self._write(tmp_path, "config:\n  app:\n    port: not-a-port\n")
        with pytest.raises(ValueError, match="Invalid configuration"):
            load_templated_yaml(path)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_templated_yaml(tmp_path / "absent.yaml")

    def test_repository_config_file_loads(self):
        path = Path(__file__).resolve().parents[3] / "config.yaml"
        config = load_templated_yaml(path, env_mode="test")
        assert config.database.url == "sqlite://"
        assert config.app.allowed_origins[0] == "http://localhost:5173"
