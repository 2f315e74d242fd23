import logging
import typing
from typing import Any

from devices import DeviceEvent, PurifierDevice, PurifierMode
from .projection import project

if typing.TYPE_CHECKING:
	from .purifier_accessory import PurifierAccessory

logger = logging.getLogger(__name__)

# Power before mode, the order a status poll reports them in
REPLAY_ORDER = [
	DeviceEvent.POWER_CHANGED,
	DeviceEvent.MODE_CHANGED,
	DeviceEvent.TEMPERATURE_CHANGED,
	DeviceEvent.HUMIDITY_CHANGED,
	DeviceEvent.PM2_5_CHANGED,
]


class DeviceEventBridge:
	"""
	Pushes device notifications into the registry.

	Strictly observational: nothing here sends commands to the device, so a
	change reported by the purifier can never bounce back to it.
	"""

	def __init__(self, accessory: 'PurifierAccessory'):
		self.accessory = accessory
		# last reported values; events of one poll arrive in any order
		self.mode: PurifierMode | None = None
		self.power: bool | None = None
		self._handlers = {
			DeviceEvent.POWER_CHANGED: self.power_changed,
			DeviceEvent.MODE_CHANGED: self.mode_changed,
		}
		config = accessory.config
		if config.show_temperature:
			self._handlers[DeviceEvent.TEMPERATURE_CHANGED] = self.temperature_changed
		if config.show_humidity:
			self._handlers[DeviceEvent.HUMIDITY_CHANGED] = self.humidity_changed
		if config.show_air_quality:
			self._handlers[DeviceEvent.PM2_5_CHANGED] = self.pm2_5_changed

	def subscribe(self, device: PurifierDevice) -> None:
		for event, handler in self._handlers.items():
			device.on(event, handler)

	def replay(self, snapshot: dict[DeviceEvent, Any]) -> None:
		"""Push a full device state, as if every property had just changed."""
		for event in REPLAY_ORDER:
			if event in snapshot and event in self._handlers:
				self._handlers[event](snapshot[event])

	def temperature_changed(self, temperature: float) -> None:
		logger.debug("Temperature is now %s", temperature)
		self.accessory.update_temperature(temperature)

	def humidity_changed(self, humidity: int) -> None:
		logger.debug("Humidity is now %s", humidity)
		self.accessory.update_humidity(humidity)

	def pm2_5_changed(self, pm2_5: int) -> None:
		logger.debug("PM2.5 is now %s", pm2_5)
		self.accessory.update_air_quality(pm2_5)

	def mode_changed(self, mode: PurifierMode) -> None:
		logger.debug("Mode is now %s", mode)
		self.mode = mode
		accessory = self.accessory
		projection = project(mode, self.power, accessory.policy)
		if accessory.policy.has_silent_switch:
			accessory.update_aux_switch(mode == PurifierMode.SILENT)
		elif accessory.engine.reads_activation_from_mode():
			accessory.update_active(projection.active)
		accessory.update_target_state(projection.target_state)

	def power_changed(self, power: bool) -> None:
		logger.debug("Power is now %s", power)
		self.power = bool(power)
		accessory = self.accessory
		if accessory.policy.has_silent_switch and not power:
			accessory.update_aux_switch(False)
		if self.mode is None:
			accessory.update_active(self.power)
		else:
			accessory.update_active(project(self.mode, self.power, accessory.policy).active)
