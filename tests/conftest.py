import os
import sys
from pathlib import Path

import pytest

# Qt widgets need a platform plugin; tests run headless
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Tests are run from the root, make 'core' and 'ui' importable
ROOT_PATH = Path(__file__).resolve().parent.parent
if ROOT_PATH.as_posix() not in sys.path:
    sys.path.insert(0, ROOT_PATH.as_posix())


@pytest.fixture
def sample_records():
    """The three-record catalogue used across the scenario tests."""
    return [
        {"id": "1", "Name": "A", "Cat": "X"},
        {"id": "2", "Name": "B", "Cat": "X"},
        {"id": "3", "Name": "C", "Cat": "Y"},
    ]
