"""This file gets auto-discovered by pytest, and is the recommended
place to have common fixtures, and avoiding flake8 complaints"""

import logging

import pytest
from hypothesis import HealthCheck, settings

from satprops import PhaseUsage, RegionTable
from satprops.utils.testing import corey_sgof, corey_swof

settings.register_profile(
    "ci", max_examples=250, deadline=None, suppress_health_check=[HealthCheck.too_slow]
)


@pytest.fixture
def default_loglevel():
    """Reset the log level for all registered loggers to WARNING

    This is necessary when testing for appearance of different log
    messages, when some of the tested commands might manipulate the log
    levels in order to set INFO or DEBUG messages, e.g. through --verbose
    sent to the command line client"""
    loggers = [logging.getLogger(name) for name in logging.root.manager.loggerDict]
    for logger in loggers:
        logger.setLevel(logging.WARNING)
    return default_loglevel


@pytest.fixture
def oilwater():
    return PhaseUsage("water,oil")


@pytest.fixture
def oilgas():
    return PhaseUsage("oil,gas")


@pytest.fixture
def threephase():
    return PhaseUsage("water,oil,gas")


@pytest.fixture
def wo_table(oilwater):
    """Water-oil region table with swl=0.1, swcr=0.2, sorw=0.2"""
    return RegionTable(oilwater, swof=corey_swof(), tag="wo")


@pytest.fixture
def wog_table(threephase):
    """Three-phase region table"""
    return RegionTable(threephase, swof=corey_swof(), sgof=corey_sgof(), tag="wog")


def pytest_addoption(parser):
    """Add option(s) that can be used on the pytest command line"""
    parser.addoption(
        "--plot",
        action="store_true",
        default=False,
        help="Run tests that display plots to the screen",
    )


def pytest_collection_modifyitems(config, items):
    """Act on options set on the command line"""
    if config.getoption("--plot"):
        # Do not skip tests when --plot is supplied on pytest command line
        return
    skip_plot = pytest.mark.skip(reason="need --plot option to run")
    for item in items:
        if "plot" in item.keywords:
            item.add_marker(skip_plot)
