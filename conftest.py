"""Pytest options for the MagicKeys test-suite.

Large key generation is slow in pure Python, so 2048 and 4096 bit cases are marked `slow` and can be skipped with
`--skip-slow`. Cases marked `extreme` only run with `--run-extreme`.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import pytest

MARKERS = {
    "slow": ("--skip-slow", "Slow test: needs no --skip-slow option"),
    "extreme": ("--run-extreme", "Extreme test: needs --run-extreme option"),
}


def pytest_addoption(parser):
    parser.addoption("--skip-slow", action="store_true", default=False, help="skip slower key sizes")
    parser.addoption("--run-extreme", action="store_true", default=False, help="run extremely slow tests")


def pytest_collection_modifyitems(config, items):
    skipdict = {}
    if config.getoption("--skip-slow"):
        skipdict["slow"] = pytest.mark.skip(reason=MARKERS["slow"][1])
    if not config.getoption("--run-extreme"):
        skipdict["extreme"] = pytest.mark.skip(reason=MARKERS["extreme"][1])
    for item in items:
        for marker, skip in skipdict.items():
            if marker in item.keywords:
                item.add_marker(skip)
