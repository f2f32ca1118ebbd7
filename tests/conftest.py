import pytest

import sys
import os
from pathlib import Path

root_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), '../')
sys.path.append(root_path)

from chunker import DummyAssigner, ProtocolConfig  # noqa: E402


def pytest_addoption(parser):
    parser.addoption("--segment_graph", action="store_true")


@pytest.fixture
def segment_graph(request: pytest.FixtureRequest):
    return request.config.getoption("--segment_graph", False)


@pytest.fixture
def config():
    return ProtocolConfig()


@pytest.fixture
def assigner(config: ProtocolConfig):
    return DummyAssigner(config)


@pytest.fixture
def graph_file(request: pytest.FixtureRequest, segment_graph: bool):
    """Returns the file where the graph of the test's segments should be saved, or None."""
    if not segment_graph:
        return None

    # Create the "tests/graphs" directory if it doesn't exist
    path = Path("tests/graphs")
    path.mkdir(exist_ok=True)
    return f"tests/graphs/{request.node.name}.html"
