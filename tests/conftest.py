"""Fixtures and configuration for pytest."""

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--gpu", action="store_true", default=False,
        help="run tests that need a real OpenGL context",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "gpu: mark test as requiring an OpenGL context")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--gpu"):
        return
    skip_gpu = pytest.mark.skip(reason="needs --gpu")
    for item in items:
        if "gpu" in item.keywords:
            item.add_marker(skip_gpu)
