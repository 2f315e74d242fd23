import logging
import typing
from typing import Any, Awaitable, Callable

from devices import DeviceError, PurifierDevice, PurifierMode
from errors import ConnectionUnavailable, DeviceCommandFailure
from .air_quality import classify
from .characteristics import TargetAirPurifierState
from .policy import DeviceCommand, level_to_speed, speed_to_level
from .projection import current_state
from .registry import Callback

if typing.TYPE_CHECKING:
	from .purifier_accessory import PurifierAccessory

logger = logging.getLogger(__name__)


class CommandDispatcher:
	"""
	Get/set handlers registered on the characteristic registry.

	Every handler reports through ``callback(error=None, value=None)``. A
	failed set leaves the external view untouched; there are no retries.
	"""

	def __init__(self, accessory: 'PurifierAccessory'):
		self.accessory = accessory

	@property
	def engine(self):
		return self.accessory.engine

	def _fail(self, callback: Callback, error: Exception) -> None:
		logger.warning("%s: %s", self.accessory.name, error)
		callback(error)

	async def _read(self, callback: Callback, what: str, operation: str, convert: Callable[[Any], Any] = lambda v: v) -> None:
		try:
			device = self.accessory.require_device()
			value = await getattr(device, operation)()
		except ConnectionUnavailable as e:
			self._fail(callback, e)
			return
		except (DeviceError, ValueError) as e:
			self._fail(callback, DeviceCommandFailure(f"getting {what}", operation, e))
			return
		callback(None, convert(value))

	async def _dispatch(
			self,
			callback: Callback,
			decide: Callable[[PurifierDevice], Awaitable[list[DeviceCommand]]],
			on_success: Callable[[], Any] | None = None) -> None:
		try:
			device = self.accessory.require_device()
			for command in await decide(device):
				try:
					await command.run(device)
				except DeviceCommandFailure as e:
					if not command.best_effort:
						raise
					logger.warning("%s: %s, continuing", self.accessory.name, e)
		except (ConnectionUnavailable, DeviceCommandFailure, ValueError) as e:
			self._fail(callback, e)
			return
		callback(None, on_success() if on_success else None)

	# Active

	async def get_active(self, callback: Callback) -> None:
		if self.engine.reads_activation_from_mode():
			await self._read(callback, "mode", "get_mode", lambda mode: self.engine.read_activation(mode, None))
		else:
			await self._read(callback, "active state (power)", "get_power", bool)

	async def set_active(self, active: bool, callback: Callback) -> None:
		logger.info("Set %s active state to %s", self.accessory.name, active)

		async def decide(_device):
			return [self.engine.decide_activation(active)]

		def on_success():
			self.accessory.view.active = bool(active)
			# the purifier does not always report the power change in time
			self.accessory.update_current_state(current_state(bool(active)))
			return bool(active)

		await self._dispatch(callback, decide, on_success)

	# Current and target state

	async def get_current_state(self, callback: Callback) -> None:
		try:
			self.accessory.require_device()
		except ConnectionUnavailable as e:
			self._fail(callback, e)
			return
		callback(None, self.accessory.view.current_state)

	async def get_target_state(self, callback: Callback) -> None:
		try:
			self.accessory.require_device()
		except ConnectionUnavailable as e:
			self._fail(callback, e)
			return
		callback(None, self.accessory.view.target_state)

	async def set_target_state(self, target: TargetAirPurifierState, callback: Callback) -> None:
		try:
			target = TargetAirPurifierState(target)
		except ValueError as e:
			self._fail(callback, e)
			return
		logger.info("Set %s target state to %s", self.accessory.name, target.name)

		async def decide(_device):
			return [self.engine.decide_target_state(target)]

		def on_success():
			self.accessory.update_target_state(target)
			return target

		await self._dispatch(callback, decide, on_success)

	# Rotation speed

	async def get_rotation_speed(self, callback: Callback) -> None:
		await self._read(callback, "rotation speed", "get_favorite_level", level_to_speed)

	async def set_rotation_speed(self, speed: float, callback: Callback) -> None:
		logger.info("Set %s rotation speed to %s", self.accessory.name, speed)

		async def decide(device: PurifierDevice):
			try:
				mode = await device.get_mode()
			except (DeviceError, ValueError) as e:
				logger.warning("Error getting %s mode: %s", self.accessory.name, e)
				mode = None
			return self.engine.decide_rotation_speed(speed, mode)

		def on_success():
			applied = level_to_speed(speed_to_level(speed))
			self.accessory.view.rotation_speed = applied
			return applied

		await self._dispatch(callback, decide, on_success)

	# Silent switch

	async def get_aux_switch(self, callback: Callback) -> None:
		await self._read(callback, "mode", "get_mode", lambda mode: mode == PurifierMode.SILENT)

	async def set_aux_switch(self, on: bool, callback: Callback) -> None:
		logger.info("Set %s silent mode enabled to %s", self.accessory.name, on)

		async def decide(_device):
			return [self.engine.decide_aux_switch(on)]

		def on_success():
			self.accessory.view.aux_switch_on = bool(on)
			return bool(on)

		await self._dispatch(callback, decide, on_success)

	# Sensors

	async def get_temperature(self, callback: Callback) -> None:
		await self._read(callback, "temperature", "get_temperature")

	async def get_humidity(self, callback: Callback) -> None:
		await self._read(callback, "relative humidity", "get_humidity")

	async def get_air_quality(self, callback: Callback) -> None:
		await self._read(callback, "air quality in words", "get_pm2_5", classify)

	async def get_pm2_5(self, callback: Callback) -> None:
		await self._read(callback, "air quality in PM2.5", "get_pm2_5")
