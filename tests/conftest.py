"""
Shared pytest fixtures for agentflow tests.
"""

import logging

import pytest

from agentflow import Edge, FilePersistence, Workflow

from sample_nodes import FinishNode, StartNode, build_interrupt_workflow


@pytest.fixture(autouse=True)
def configure_test_logging(caplog):
    """Capture agentflow logs at DEBUG for every test."""
    caplog.set_level(logging.DEBUG, logger="agentflow")
    return caplog


@pytest.fixture
def file_persistence(tmp_path):
    return FilePersistence(tmp_path)


@pytest.fixture
def basic_workflow():
    """Start --> Finish"""
    return (
        Workflow()
        .add_node(StartNode())
        .add_node(FinishNode())
        .add_edge(Edge(StartNode, FinishNode))
        .set_start(StartNode)
        .set_end(FinishNode)
    )


@pytest.fixture
def interrupt_workflow(file_persistence):
    return build_interrupt_workflow(file_persistence)
