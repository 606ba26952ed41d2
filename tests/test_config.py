"""Unit tests for environment-driven configuration."""

import pytest

import clinic_app
from clinic_app import components, data_generation, page_modules, services, utils
from clinic_app.utils import config


class TestDataBackend:
    def test_defaults_to_snowflake(self, monkeypatch) -> None:
        monkeypatch.delenv('DATA_BACKEND', raising=False)
        assert config.get_data_backend() == config.BACKEND_SNOWFLAKE

    @pytest.mark.parametrize("value", ["memory", "MEMORY"])
    def test_memory(self, monkeypatch, value: str) -> None:
        monkeypatch.setenv('DATA_BACKEND', value)
        assert config.get_data_backend() == config.BACKEND_MEMORY

    def test_unknown_value_falls_back(self, monkeypatch) -> None:
        monkeypatch.setenv('DATA_BACKEND', 'postgres')
        assert config.get_data_backend() == config.BACKEND_SNOWFLAKE


class TestSettings:
    def test_auth_defaults(self, monkeypatch) -> None:
        for name in ('DEMO_USER', 'DEMO_PASSWORD', 'SESSION_TIMEOUT'):
            monkeypatch.delenv(name, raising=False)

        auth = config.get_auth_config()

        assert auth == {'demo_user': 'admin', 'demo_password': 'wellness', 'session_timeout': 3600}

    def test_feature_flags(self, monkeypatch) -> None:
        monkeypatch.setenv('FEATURE_DOWNLOADS', 'false')
        monkeypatch.delenv('FEATURE_REPORT_GENERATION', raising=False)

        flags = config.get_feature_flags()

        assert flags['enable_downloads'] is False
        assert flags['enable_report_generation'] is True

    def test_app_config(self, monkeypatch) -> None:
        monkeypatch.setenv('DATA_BACKEND', 'memory')
        monkeypatch.setenv('SEED_PATIENTS', '10')

        app = config.get_app_config()

        assert app['app_name'] == 'Wellness+'
        assert app['data_backend'] == 'memory'
        assert app['seed_patients'] == 10

    @pytest.mark.parametrize("value, expected", [("debug", "DEBUG"), ("verbose", "INFO")])
    def test_log_level(self, monkeypatch, value: str, expected: str) -> None:
        monkeypatch.setenv('LOG_LEVEL', value)
        assert config.get_log_level() == expected


class TestValidation:
    def test_snowflake_needs_account(self, monkeypatch) -> None:
        monkeypatch.setenv('DATA_BACKEND', 'snowflake')
        monkeypatch.delenv('SNOWFLAKE_ACCOUNT', raising=False)
        monkeypatch.setattr(config, '_secrets_section', lambda name: {})

        assert config.validate_configuration() is False

    def test_memory_rejected_in_production(self, monkeypatch) -> None:
        monkeypatch.setenv('DATA_BACKEND', 'memory')
        monkeypatch.setenv('ENVIRONMENT', 'production')

        assert config.validate_configuration() is False

    def test_memory_in_development(self, monkeypatch) -> None:
        monkeypatch.setenv('DATA_BACKEND', 'memory')
        monkeypatch.setenv('ENVIRONMENT', 'development')

        assert config.validate_configuration() is True


class TestEnvironmentFile:
    def test_loads_without_overriding(self, monkeypatch, tmp_path) -> None:
        env_file = tmp_path / '.env'
        env_file.write_text("# comment\nCLINIC_NAME=Wellness+ Bandung\nAPP_NAME=Other\n")
        # Registered first so the value loaded from the file is undone afterwards
        monkeypatch.setenv('CLINIC_NAME', 'placeholder')
        monkeypatch.delenv('CLINIC_NAME')
        monkeypatch.setenv('APP_NAME', 'Wellness+')

        assert config.load_environment_file(str(env_file)) is True

        assert config.get_app_config()['clinic_name'] == 'Wellness+ Bandung'
        assert config.get_app_config()['app_name'] == 'Wellness+'

    def test_missing_file(self, tmp_path) -> None:
        assert config.load_environment_file(str(tmp_path / 'missing.env')) is False


class TestPackaging:
    def test_subpackages_are_namespaced(self) -> None:
        for package in (components, data_generation, page_modules, services, utils):
            assert package.__name__.startswith('clinic_app.')

    def test_default_version_matches_package(self, monkeypatch) -> None:
        monkeypatch.delenv('APP_VERSION', raising=False)
        assert config.get_app_config()['app_version'] == clinic_app.__version__
