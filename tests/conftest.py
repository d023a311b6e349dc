"""Shared fixtures and the --skip-slow / --run-extreme options."""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import pytest

from rsafile import rsa
from rsafile.randstate import RandState

IDENTITY = "tester"


def pytest_addoption(parser):
    parser.addoption("--skip-slow", action="store_true", default=False, help="skip slower tests")
    parser.addoption("--run-extreme", action="store_true", default=False, help="run extremely slow key sizes")


def pytest_collection_modifyitems(config, items):
    markers = {}
    if config.getoption("--skip-slow"):
        markers["slow"] = pytest.mark.skip(reason="Slow test: needs no --skip-slow option")
    if not config.getoption("--run-extreme"):
        markers["extreme"] = pytest.mark.skip(reason="Extreme test: needs --run-extreme option")
    for item in items:
        for keyword, marker in markers.items():
            if keyword in item.keywords:
                item.add_marker(marker)


@pytest.fixture(scope="session")
def keypair() -> tuple[rsa.RSAPubKey, rsa.RSAPrivKey]:
    """256-bit key pair signed for IDENTITY, identical on every run."""
    with RandState(17092025) as rng:
        return rsa.generate(256, IDENTITY, 50, rng)


@pytest.fixture
def rng():
    with RandState(2025) as state:
        yield state
