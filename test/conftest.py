"""
Test Configuration and Fixtures

This module provides:
- Environment setup before any application module reads settings at import time
- Database fixtures live in test/service/cinema/conftest.py (one SQLite file per test)

Architecture:
- Unit tests (test/**/unit/): mocked unit of work, no database
- Integration tests (test/**/integration/): real SQLite database in tmp_path
- API tests (test/**/api/): FastAPI app over httpx ASGITransport, real SQLite database
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings and the loguru sinks are built at import time
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    # Tests drive reconciliation and audits explicitly
    os.environ['MAINTENANCE_ENABLED'] = 'false'
    os.environ['OTEL_CONSOLE_EXPORT'] = 'false'
    os.environ.pop('OTEL_EXPORTER_OTLP_ENDPOINT', None)

    # Fallback database for anything that reaches the container unpatched
    os.environ['DATABASE_URL_ASYNC'] = f'sqlite+aiosqlite:///{test_log_dir / "cinema_test.db"}'
    os.environ.setdefault('DB_LOCK_TIMEOUT_MS', '5000')


# Call immediately to set env vars before any imports
_early_setup_test_environment()

import pytest  # noqa: E402


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Mark tests by directory so `-m unit` and `-m integration` work without decorators."""
    for item in items:
        path = str(item.fspath)
        if '/unit/' in path:
            item.add_marker(pytest.mark.unit)
        elif '/integration/' in path:
            item.add_marker(pytest.mark.integration)
        elif '/api/' in path:
            item.add_marker(pytest.mark.api)
