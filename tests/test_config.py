"""Tests for catalog configuration.

These tests cover:
1. Default values
2. Environment variable loading
3. Field validation
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from library_catalog.config import CatalogConfig, get_config, reset_config


class TestCatalogConfig:
    """Configuration defaults and validation."""

    def test_default_configuration(self):
        config = CatalogConfig()

        assert config.database_path == Path("data/library.db").absolute()
        assert config.database_url is None
        assert config.echo_sql is False
        assert config.log_level == "INFO"
        assert config.enable_tracing is True
        assert config.product_version == "0.1.0"

    def test_environment_variable_loading(self, tmp_path):
        env_vars = {
            "LIBRARY_CATALOG_DATABASE_PATH": str(tmp_path / "env.db"),
            "LIBRARY_CATALOG_DEBUG": "true",
            "LIBRARY_CATALOG_LOG_LEVEL": "warning",
            "LIBRARY_CATALOG_PRODUCT_VERSION": "2.1.0",
        }

        with patch.dict(os.environ, env_vars):
            config = CatalogConfig()

        assert config.database_path == tmp_path / "env.db"
        assert config.debug is True
        assert config.log_level == "WARNING"
        assert config.product_version == "2.1.0"
        assert config.is_development is True

    def test_database_directory_is_created(self, tmp_path):
        target = tmp_path / "nested" / "dir" / "catalog.db"
        CatalogConfig(database_path=target)
        assert target.parent.is_dir()

    def test_database_url_overrides_path(self, tmp_path):
        config = CatalogConfig(database_path=tmp_path / "x.db")
        assert config.get_database_url() == f"sqlite:///{tmp_path / 'x.db'}"

        config = CatalogConfig(database_url="mssql+pyodbc://catalog")
        assert config.get_database_url() == "mssql+pyodbc://catalog"

    @pytest.mark.parametrize("level", ["TRACE", "verbose", ""])
    def test_invalid_log_level(self, level):
        with pytest.raises(ValidationError):
            CatalogConfig(log_level=level)

    @pytest.mark.parametrize("version", ["1.0", "v1.0.0", "latest"])
    def test_invalid_product_version(self, version):
        with pytest.raises(ValidationError):
            CatalogConfig(product_version=version)

    def test_pool_size_bounds(self):
        with pytest.raises(ValidationError):
            CatalogConfig(pool_size=0)


class TestConfigSingleton:
    def test_get_config_returns_same_instance(self):
        reset_config()
        assert get_config() is get_config()

    def test_reset_config_creates_new_instance(self):
        first = get_config()
        reset_config()
        assert get_config() is not first
