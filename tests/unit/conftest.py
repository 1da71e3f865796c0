"""Unit tests conftest for Lambda function test isolation.

Lambda handlers are loaded with importlib under unique module names
(scraping_orchestrator_index, task_executor_index), so they never collide
in sys.modules. Cached AWS clients in activities_common.storage are reset
around every test so moto-backed tests always get fresh clients.
"""

import pytest

from activities_common.storage import reset_clients


@pytest.fixture(autouse=True)
def _reset_storage_clients():
    reset_clients()
    yield
    reset_clients()
