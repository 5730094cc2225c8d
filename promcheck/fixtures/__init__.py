"""
Fixtures set up before and torn down after a check
"""

from promcheck.fixtures.base import Fixture
from promcheck.fixtures.compose import ComposeStack
from promcheck.fixtures.script import ContainerScriptFixture, ScriptFixture, run_script

__all__ = [
    "Fixture",
    "ComposeStack",
    "ScriptFixture",
    "ContainerScriptFixture",
    "run_script",
]
