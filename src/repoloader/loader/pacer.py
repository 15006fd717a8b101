"""Fixed delay between strides."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class Pacer:
	"""Suspends the replay loop for a fixed interval to limit load on the remote and the cache."""

	def __init__(self, interval: float, sleep: Callable[[float], Awaitable[None]] = asyncio.sleep) -> None:
		"""
		Initialize the pacer.

		Args:
		    interval: Seconds to wait between strides
		    sleep: Coroutine used to wait, replaceable in tests

		"""
		self.interval = interval
		self._sleep = sleep

	async def wait(self) -> None:
		"""Wait for the configured interval."""
		logger.info("Waiting %s seconds to resume execution", self.interval)
		await self._sleep(self.interval)
