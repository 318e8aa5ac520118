"""
Pytest configuration and shared fixtures for nurbsmake tests.
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add the parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def tolerance():
    """Default tolerance for floating point comparisons."""
    return 1e-12


@pytest.fixture
def loose_tolerance():
    """Looser tolerance for comparisons after several rational evaluations."""
    return 1e-8


@pytest.fixture
def unit_frame():
    """Center and in-plane axes of the xy-plane."""
    return (np.array([0.0, 0.0, 0.0]),
            np.array([1.0, 0.0, 0.0]),
            np.array([0.0, 1.0, 0.0]))
