from __future__ import annotations

import logging

import pytest


@pytest.fixture
def restore_root_logger():
    """Undo handler and level changes made by setup_logging."""
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
