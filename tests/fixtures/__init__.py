"""
Test fixtures package for token vault tests.

This package provides factory functions for creating test objects:
- common.py: records and a deployed custody scenario

Usage:
    from fixtures import make_record, make_vault_scenario

    def test_something():
        scenario = make_vault_scenario(paused=True)
        proof = scenario.proof_for(1)
"""

from .common import (
    ETHER,
    SIXTY_DAYS,
    VaultScenario,
    make_record,
    make_records,
    make_vault_scenario,
)

__all__ = [
    "ETHER",
    "SIXTY_DAYS",
    "VaultScenario",
    "make_record",
    "make_records",
    "make_vault_scenario",
]
