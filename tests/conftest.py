"""
Shared fixtures for the satellite pass lookup tests.

Every test mocks requests.get; nothing here touches the network.
"""

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add project root to path to allow imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def make_response(status_code=200, payload=None, text=None):
    """Build a MagicMock that looks enough like a requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    if text is None:
        text = json.dumps(payload)
    response.text = text
    if payload is None:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def lookup():
    from satellite_passes_lookup import Config, SatellitePassLookup

    return SatellitePassLookup(Config())
