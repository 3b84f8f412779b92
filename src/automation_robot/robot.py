"""
Robot base class.

A robot is a job factory bound to one execution backend. Subclasses build
the driver; the base class normalizes the creation parameters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .jobs import Job
from .logging import Logger, NullLogger
from .types import JobCategory


class Robot(ABC):
    """Creates jobs for a single backend (local engine or Automation Service)."""

    def __init__(self, logger: Logger | None = None):
        self.logger = logger or NullLogger()

    async def create_job(
        self,
        *,
        category: JobCategory | str = JobCategory.TEST,
        input: dict[str, Any] | None = None,
    ) -> Job:
        """
        Create a job, seeding its inputs with ``input``.

        Args:
            category: ``test`` (default) or ``live``
            input: Initial inputs, keyed by input key
        """
        return await self._create_job(JobCategory(category), dict(input or {}))

    @abstractmethod
    async def _create_job(self, category: JobCategory, input: dict[str, Any]) -> Job: ...


__all__ = ["Robot"]
