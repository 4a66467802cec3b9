import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from fastapi.testclient import TestClient

# Route tests fire many requests from one client
os.environ.setdefault("DUCT_API_RATE_LIMIT", "10000")


@pytest.fixture
def client():
    from ductservice.main import app
    with TestClient(app) as c:
        yield c


@pytest.fixture
def two_branch_payload():
    """AHU → junction → 300 and 700 CFM diffusers."""
    return {
        "id": "office",
        "name": "Office Floor",
        "nodes": [
            {"id": "ahu-1", "type": "ahu", "name": "AHU"},
            {"id": "j1", "type": "junction"},
            {"id": "d1", "type": "diffuser", "cfm": 300},
            {"id": "d2", "type": "diffuser", "cfm": 700},
        ],
        "segments": [
            {"id": "main", "from_node_id": "ahu-1", "to_node_id": "j1", "length": 10},
            {"id": "b1", "from_node_id": "j1", "to_node_id": "d1", "length": 5,
             "fittings": [{"fitting_id": "boot-90"}]},
            {"id": "b2", "from_node_id": "j1", "to_node_id": "d2", "length": 8},
        ],
    }
