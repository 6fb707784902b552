import logging

import pytest


@pytest.fixture(autouse=True)
def _restore_root_logger():
    # the CLI replaces root handlers; keep that from leaking across tests
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
