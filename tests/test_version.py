"""Simple version check for the package."""

import importlib
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

melody_tree = importlib.import_module("melody_tree")


def test_version_matches():
    """Ensure ``melody_tree.__version__`` exposes the release version."""
    assert melody_tree.__version__ == "0.1.0"


def test_public_api_is_exported():
    for name in melody_tree.__all__:
        assert hasattr(melody_tree, name)
