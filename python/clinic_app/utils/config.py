"""
Configuration for the Wellness+ Clinic Dashboard

Settings come from environment variables (optionally seeded from a ``.env``
file in development) and, for the Snowflake connection, from the
``[snowflake]`` section of Streamlit secrets.
"""

import os
import logging
from typing import Dict, Any
from pathlib import Path

import streamlit as st

from clinic_app import __version__

logger = logging.getLogger(__name__)

BACKEND_SNOWFLAKE = 'snowflake'
BACKEND_MEMORY = 'memory'
BACKENDS = (BACKEND_SNOWFLAKE, BACKEND_MEMORY)

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
DEFAULT_LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'

# Loggers that are chatty at INFO
QUIET_LOGGERS = ('snowflake', 'urllib3', 'faker')


def _env_flag(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).lower() in ('1', 'true', 'yes')


def _environment() -> str:
    return os.getenv('ENVIRONMENT', 'development').lower()


def get_data_backend() -> str:
    """Selected data store backend: 'snowflake' (default) or 'memory'"""
    backend = os.getenv('DATA_BACKEND', BACKEND_SNOWFLAKE).lower()
    if backend in BACKENDS:
        return backend
    logger.warning(f"Unknown DATA_BACKEND '{backend}', using {BACKEND_SNOWFLAKE}")
    return BACKEND_SNOWFLAKE


def get_app_config() -> Dict[str, Any]:
    """
    Application-level settings

    Returns:
        Dictionary with display names, environment and demo-data options
    """
    try:
        return {
            'app_name': os.getenv('APP_NAME', 'Wellness+'),
            'clinic_name': os.getenv('CLINIC_NAME', 'Wellness+ Private Clinic'),
            'app_version': os.getenv('APP_VERSION', __version__),
            'environment': _environment(),
            'debug': _env_flag('DEBUG', 'true'),
            'log_level': get_log_level(),
            'data_backend': get_data_backend(),
            'seed_demo_data': _env_flag('SEED_DEMO_DATA', 'true'),
            'seed_patients': int(os.getenv('SEED_PATIENTS', '25')),
        }
    except ValueError as e:
        logger.error(f"Invalid application setting: {e}")
        return {
            'app_name': 'Wellness+',
            'environment': _environment(),
            'data_backend': get_data_backend(),
            'seed_demo_data': False,
        }


def _secrets_section(name: str) -> Dict[str, Any]:
    try:
        if name in st.secrets:
            return dict(st.secrets[name])
    except Exception as e:
        logger.debug(f"Could not load [{name}] from Streamlit secrets: {e}")
    return {}


def get_database_config() -> Dict[str, Any]:
    """
    Snowflake connection settings

    Values in the ``[snowflake]`` secrets section win over environment
    variables. User and password are never read here; they come from the
    sign-in form.

    Returns:
        Dictionary of connection settings (account may be None)
    """
    secrets = _secrets_section('snowflake')

    def setting(key: str, env: str, default: str = None):
        return secrets.get(key) or os.getenv(env, default)

    config = {
        'snowflake_account': setting('account', 'SNOWFLAKE_ACCOUNT'),
        'snowflake_database': setting('database', 'SNOWFLAKE_DATABASE', 'WELLNESS_CLINIC'),
        'snowflake_schema': setting('schema', 'SNOWFLAKE_SCHEMA', 'PUBLIC'),
        'snowflake_warehouse': setting('warehouse', 'SNOWFLAKE_WAREHOUSE', 'COMPUTE_WH'),
        'snowflake_role': setting('role', 'SNOWFLAKE_ROLE'),
    }
    try:
        config['connection_timeout'] = int(os.getenv('CONNECTION_TIMEOUT', '60'))
    except ValueError:
        logger.warning("CONNECTION_TIMEOUT is not a number, using 60 seconds")
        config['connection_timeout'] = 60
    return config


def get_auth_config() -> Dict[str, Any]:
    """
    Sign-in settings

    The in-memory backend has no user directory of its own, so it checks the
    demo credentials configured here.
    """
    return {
        'demo_user': os.getenv('DEMO_USER', 'admin'),
        'demo_password': os.getenv('DEMO_PASSWORD', 'wellness'),
        'session_timeout': int(os.getenv('SESSION_TIMEOUT', '3600')),
    }


def get_feature_flags() -> Dict[str, bool]:
    """Switches for optional page actions; all on unless disabled"""
    return {
        'enable_report_generation': _env_flag('FEATURE_REPORT_GENERATION', 'true'),
        'enable_downloads': _env_flag('FEATURE_DOWNLOADS', 'true'),
        'enable_patient_edit': _env_flag('FEATURE_PATIENT_EDIT', 'true'),
        'enable_status_updates': _env_flag('FEATURE_STATUS_UPDATES', 'true'),
    }


def is_development() -> bool:
    return _environment() == 'development'


def is_production() -> bool:
    return _environment() == 'production'


def get_log_level() -> str:
    """LOG_LEVEL if it names a standard level, otherwise INFO"""
    level = os.getenv('LOG_LEVEL', 'INFO').upper()
    return level if level in LOG_LEVELS else 'INFO'


def setup_logging() -> None:
    """Configure root logging once per process"""
    level = get_log_level()
    handlers = [logging.StreamHandler()]
    if not is_development():
        handlers.append(logging.FileHandler(os.getenv('LOG_FILE', 'wellness_clinic.log')))

    logging.basicConfig(
        level=getattr(logging, level),
        format=os.getenv('LOG_FORMAT', DEFAULT_LOG_FORMAT),
        handlers=handlers,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug(f"Logging at {level} ({_environment()})")


def validate_configuration() -> bool:
    """
    Check that the selected backend can be used

    Returns:
        True when no problems were found; problems are logged
    """
    problems = []
    backend = get_data_backend()

    if backend == BACKEND_SNOWFLAKE and not get_database_config().get('snowflake_account'):
        problems.append("SNOWFLAKE_ACCOUNT is not set")
    if backend == BACKEND_MEMORY and is_production():
        problems.append("the in-memory backend cannot be used in production")

    for problem in problems:
        logger.error(f"Configuration problem: {problem}")
    return not problems


def load_environment_file(env_file: str = '.env') -> bool:
    """
    Seed os.environ from a KEY=VALUE file without overriding existing values

    Args:
        env_file: Path of the file to read

    Returns:
        True if the file was read
    """
    path = Path(env_file)
    if not path.is_file():
        logger.debug(f"No environment file at {env_file}")
        return False

    try:
        lines = path.read_text().splitlines()
    except OSError as e:
        logger.error(f"Could not read {env_file}: {e}")
        return False

    for raw in lines:
        entry = raw.strip()
        if not entry or entry.startswith('#') or '=' not in entry:
            continue
        key, value = entry.split('=', 1)
        os.environ.setdefault(key.strip(), value.strip())

    logger.info(f"Loaded environment from {env_file}")
    return True


def load_app_config() -> Dict[str, Any]:
    """
    Prepare logging and environment, then collect every settings group

    Returns:
        Dictionary with ``app``, ``database``, ``auth`` and ``features`` groups
    """
    setup_logging()
    if is_development():
        load_environment_file()

    if not validate_configuration():
        logger.warning("Continuing with incomplete configuration")

    return {
        'app': get_app_config(),
        'database': get_database_config(),
        'auth': get_auth_config(),
        'features': get_feature_flags(),
    }
