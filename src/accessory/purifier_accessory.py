import logging

from configuration import AccessoryConfig
from devices import DeviceError, PurifierDevice
from errors import ConnectionUnavailable, DeviceCommandFailure
from .air_quality import classify
from .characteristics import (
	Characteristic, CurrentAirPurifierState, Service, TargetAirPurifierState,
)
from .dispatcher import CommandDispatcher
from .event_bridge import DeviceEventBridge
from .policy import AccessoryPolicy, ModePolicyEngine
from .projection import ExternalView, current_state
from .prober import LivenessProber
from .registry import Callback, CharacteristicRegistry

logger = logging.getLogger(__name__)

BLINK_STEPS = 3


class PurifierAccessory:
	"""
	The purifier as seen by the bridge.

	Registers the services of the accessory, owns the external view mirrored
	into the registry and the device session, once one is attached.
	"""

	def __init__(self, config: AccessoryConfig, registry: CharacteristicRegistry):
		self.config = config
		self.name = config.name
		self.policy = AccessoryPolicy(config.policy)
		self.engine = ModePolicyEngine(self.policy)
		self.registry = registry
		self.view = ExternalView()
		self.device: PurifierDevice | None = None
		self.dispatcher = CommandDispatcher(self)
		self.events = DeviceEventBridge(self)
		self.prober = LivenessProber(self, config.keepalive_interval)
		self._register_services()
		self._register_handlers()

	def _register_services(self) -> None:
		view = self.view
		self.registry.add_service(Service.ACCESSORY_INFORMATION, {
			Characteristic.NAME: self.name,
			Characteristic.MANUFACTURER: self.config.manufacturer,
			Characteristic.MODEL: self.config.model,
			Characteristic.SERIAL_NUMBER: self.config.serial_number,
			Characteristic.FIRMWARE_REVISION: self.config.firmware,
		})
		self.registry.add_service(Service.AIR_PURIFIER, {
			Characteristic.NAME: self.name,
			Characteristic.ACTIVE: view.active,
			Characteristic.CURRENT_AIR_PURIFIER_STATE: view.current_state,
			Characteristic.TARGET_AIR_PURIFIER_STATE: view.target_state,
			Characteristic.ROTATION_SPEED: view.rotation_speed,
		})
		if self.policy.has_silent_switch:
			self.registry.add_service(Service.SWITCH, {
				Characteristic.NAME: f"Silent {self.name}",
				Characteristic.ON: view.aux_switch_on,
			})
		if self.config.show_temperature:
			self.registry.add_service(Service.TEMPERATURE_SENSOR, {
				Characteristic.CURRENT_TEMPERATURE: view.temperature,
			})
		if self.config.show_humidity:
			self.registry.add_service(Service.HUMIDITY_SENSOR, {
				Characteristic.CURRENT_RELATIVE_HUMIDITY: view.humidity,
			})
		if self.config.show_air_quality:
			self.registry.add_service(Service.AIR_QUALITY_SENSOR, {
				Characteristic.AIR_QUALITY: view.air_quality,
				Characteristic.PM2_5_DENSITY: view.pm2_5_density,
			})

	def _register_handlers(self) -> None:
		registry, dispatcher = self.registry, self.dispatcher
		purifier = Service.AIR_PURIFIER
		registry.on_get(purifier, Characteristic.ACTIVE, dispatcher.get_active)
		registry.on_set(purifier, Characteristic.ACTIVE, dispatcher.set_active)
		registry.on_get(purifier, Characteristic.CURRENT_AIR_PURIFIER_STATE, dispatcher.get_current_state)
		registry.on_get(purifier, Characteristic.TARGET_AIR_PURIFIER_STATE, dispatcher.get_target_state)
		registry.on_set(purifier, Characteristic.TARGET_AIR_PURIFIER_STATE, dispatcher.set_target_state)
		registry.on_get(purifier, Characteristic.ROTATION_SPEED, dispatcher.get_rotation_speed)
		registry.on_set(purifier, Characteristic.ROTATION_SPEED, dispatcher.set_rotation_speed)
		if self.policy.has_silent_switch:
			registry.on_get(Service.SWITCH, Characteristic.ON, dispatcher.get_aux_switch)
			registry.on_set(Service.SWITCH, Characteristic.ON, dispatcher.set_aux_switch)
		if self.config.show_temperature:
			registry.on_get(Service.TEMPERATURE_SENSOR, Characteristic.CURRENT_TEMPERATURE, dispatcher.get_temperature)
		if self.config.show_humidity:
			registry.on_get(Service.HUMIDITY_SENSOR, Characteristic.CURRENT_RELATIVE_HUMIDITY, dispatcher.get_humidity)
		if self.config.show_air_quality:
			registry.on_get(Service.AIR_QUALITY_SENSOR, Characteristic.AIR_QUALITY, dispatcher.get_air_quality)
			registry.on_get(Service.AIR_QUALITY_SENSOR, Characteristic.PM2_5_DENSITY, dispatcher.get_pm2_5)
		registry.on_identify(self.identify)

	def attach(self, device: PurifierDevice) -> None:
		"""Start using a connected device session."""
		self.device = device
		self.events.subscribe(device)
		self.events.replay(device.snapshot())

	def detach(self) -> None:
		self.device = None

	def require_device(self) -> PurifierDevice:
		if self.device is None:
			raise ConnectionUnavailable(self.name)
		return self.device

	def update_active(self, active: bool) -> None:
		self.view.active = active
		self.registry.update_value(Service.AIR_PURIFIER, Characteristic.ACTIVE, active)
		self.update_current_state(current_state(active))

	def update_current_state(self, state: CurrentAirPurifierState) -> None:
		self.view.current_state = state
		self.registry.update_value(Service.AIR_PURIFIER, Characteristic.CURRENT_AIR_PURIFIER_STATE, state)

	def update_target_state(self, state: TargetAirPurifierState) -> None:
		self.view.target_state = state
		self.registry.update_value(Service.AIR_PURIFIER, Characteristic.TARGET_AIR_PURIFIER_STATE, state)

	def update_aux_switch(self, on: bool) -> None:
		self.view.aux_switch_on = on
		self.registry.update_value(Service.SWITCH, Characteristic.ON, on)

	def update_temperature(self, temperature: float) -> None:
		self.view.temperature = temperature
		self.registry.update_value(Service.TEMPERATURE_SENSOR, Characteristic.CURRENT_TEMPERATURE, temperature)

	def update_humidity(self, humidity: int) -> None:
		self.view.humidity = humidity
		self.registry.update_value(Service.HUMIDITY_SENSOR, Characteristic.CURRENT_RELATIVE_HUMIDITY, humidity)

	def update_air_quality(self, pm2_5: int) -> None:
		self.view.air_quality = classify(pm2_5)
		self.view.pm2_5_density = pm2_5
		self.registry.update_value(Service.AIR_QUALITY_SENSOR, Characteristic.AIR_QUALITY, self.view.air_quality)
		self.registry.update_value(Service.AIR_QUALITY_SENSOR, Characteristic.PM2_5_DENSITY, pm2_5)

	async def identify(self, paired: bool, callback: Callback) -> None:
		"""Blink the LEDs by stepping through the brightness cycle."""
		logger.info("%s identify. Paired: %s", self.name, paired)
		try:
			device = self.require_device()
		except ConnectionUnavailable as e:
			callback(e)
			return
		try:
			brightness = await device.get_led_brightness()
			for _ in range(BLINK_STEPS):
				brightness = await device.set_led_brightness(brightness.next())
		except (DeviceError, ValueError) as e:
			error = DeviceCommandFailure("blinking LEDs", "set_led_brightness", e)
			logger.warning("%s: %s", self.name, error)
			callback(error)
			return
		logger.info("%s blinked successfully", self.name)
		callback()
