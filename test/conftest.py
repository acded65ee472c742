"""
Test Configuration and Fixtures

- Environment is fixed before application modules read settings at import time
- The in-memory document store backs every test unless KVROCKS_INTEGRATION=1
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    worker_id = os.environ.get('PYTEST_XDIST_WORKER', 'master')
    os.environ['KVROCKS_KEY_PREFIX'] = 'test_' if worker_id == 'master' else f'test_{worker_id}_'
    os.environ.setdefault('EXCHANGE_STORE_BACKEND', 'memory')

    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)


_early_setup_test_environment()

from collections.abc import Generator  # noqa: E402

import pytest  # noqa: E402

from src.platform.config.di import container  # noqa: E402


@pytest.fixture(autouse=True)
def reset_container() -> Generator[None, None, None]:
    """Every test starts from an empty in-memory store and fresh singletons"""
    container.in_memory_store().clear()
    yield
    container.in_memory_store().clear()
    container.email_service().sent_emails.clear()
