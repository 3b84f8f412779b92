"""
In-process job execution.
"""

from .driver import LocalJobDriver
from .engine import AutomationEngine, BrowserLauncher, EngineCallbacks, EngineFactory
from .robot import LocalRobot
from .script import SCRIPT_SCHEMA, load_script

__all__ = [
    "LocalRobot",
    "LocalJobDriver",
    "AutomationEngine",
    "EngineCallbacks",
    "EngineFactory",
    "BrowserLauncher",
    "SCRIPT_SCHEMA",
    "load_script",
]
