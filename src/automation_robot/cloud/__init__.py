"""
Remote job execution on the Automation Service.
"""

from .api import (
    AutomationServiceClient,
    PreviousJobOutput,
    ServiceJob,
    ServiceJobEvent,
    ServiceJobInput,
    ServiceJobOutput,
)
from .auth import AuthAgent, BasicAuthAgent, OAuth2Agent, auth_agent_for
from .driver import CloudJobDriver
from .robot import CloudRobot

__all__ = [
    # Robot
    "CloudRobot",
    "CloudJobDriver",
    # API
    "AutomationServiceClient",
    "ServiceJob",
    "ServiceJobEvent",
    "ServiceJobInput",
    "ServiceJobOutput",
    "PreviousJobOutput",
    # Auth
    "AuthAgent",
    "BasicAuthAgent",
    "OAuth2Agent",
    "auth_agent_for",
]
