import asyncio
import logging
import typing

from devices import DeviceError

if typing.TYPE_CHECKING:
	from .purifier_accessory import PurifierAccessory

logger = logging.getLogger(__name__)

KEEPALIVE_INTERVAL = 300


class LivenessProber:
	"""
	Periodically reads something harmless from the purifier.

	Without regular traffic the bridge ends up reporting the accessory as not
	responding the first time it is used after a quiet period.
	"""

	def __init__(self, accessory: 'PurifierAccessory', interval: float = KEEPALIVE_INTERVAL):
		self.accessory = accessory
		self.interval = interval

	async def probe(self) -> None:
		accessory = self.accessory
		if accessory.device is None:
			logger.debug("%s is not connected, skipping keepalive", accessory.name)
			return
		if accessory.config.show_temperature:
			await accessory.dispatcher.get_temperature(self._temperature_read)
			return
		try:
			await accessory.device.get_power()
		except DeviceError as e:
			logger.warning("Keepalive read of %s failed: %s", accessory.name, e)

	def _temperature_read(self, error: Exception | None = None, value=None) -> None:
		if error is not None:
			logger.warning("Keepalive read of %s failed: %s", self.accessory.name, error)
			return
		self.accessory.update_temperature(value)

	async def run(self) -> None:
		while True:
			await asyncio.sleep(self.interval)
			await self.probe()
