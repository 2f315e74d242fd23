import asyncio
import logging
from typing import Any, Callable

from miio import DeviceException
from miio.integrations.airpurifier.zhimi.airpurifier import (
	AirPurifier, AirPurifierStatus, LedBrightness as MiioLedBrightness, OperationMode,
)

from errors import ConnectionEstablishmentFailure
from .purifier_device import (
	DeviceError, DeviceEvent, LedBrightness, PurifierDevice, PurifierMode, RawStatus,
)

logger = logging.getLogger(__name__)

POWER = "is_on"
MODE = "mode"
FAVORITE_LEVEL = "favorite_level"
TEMPERATURE = "temperature"
HUMIDITY = "humidity"
PM2_5 = "aqi"
LED_BRIGHTNESS = "led_brightness"

LED_BRIGHTNESS_LEVELS = {
	LedBrightness.BRIGHT: MiioLedBrightness.Bright,
	LedBrightness.DIM: MiioLedBrightness.Dim,
	LedBrightness.OFF: MiioLedBrightness.Off,
}

MAX_FAVORITE_LEVEL = 16


class MiioPurifier(PurifierDevice):
	"""Mi Air Purifier (zhimi.airpurifier.*) driven through python-miio."""

	EVENTS = {
		POWER: DeviceEvent.POWER_CHANGED,
		MODE: DeviceEvent.MODE_CHANGED,
		TEMPERATURE: DeviceEvent.TEMPERATURE_CHANGED,
		HUMIDITY: DeviceEvent.HUMIDITY_CHANGED,
		PM2_5: DeviceEvent.PM2_5_CHANGED,
	}

	def __init__(self, address: str, token: str, model: str, timeout: int | None = None):
		super().__init__()
		self.address = address
		self.model = model
		self._device = AirPurifier(ip=address, token=token, timeout=timeout, model=model)
		self._lock = asyncio.Lock()

	async def _call(self, method: Callable[..., Any], *args) -> Any:
		async with self._lock:
			try:
				return await asyncio.to_thread(method, *args)
			except DeviceException as e:
				raise DeviceError(f"{method.__name__} failed on {self.address}: {e}") from e

	async def _status(self) -> RawStatus:
		status: AirPurifierStatus = await self._call(self._device.status)
		# mode and LED stay raw: some models report values outside the enums
		state = {
			POWER: status.is_on,
			MODE: status.data.get("mode"),
			FAVORITE_LEVEL: status.favorite_level,
			TEMPERATURE: status.temperature,
			HUMIDITY: status.humidity,
			PM2_5: status.aqi,
			LED_BRIGHTNESS: status.data.get("led_b"),
		}
		self.update(state)
		return state

	async def _read(self, field: str) -> Any:
		return self.decode(field, (await self._status())[field])

	def decode(self, field: str, value):
		if field == MODE:
			return PurifierMode(OperationMode(value).value)
		if field == LED_BRIGHTNESS:
			level = MiioLedBrightness(value)
			for brightness, miio_level in LED_BRIGHTNESS_LEVELS.items():
				if miio_level == level:
					return brightness
		if field in (FAVORITE_LEVEL, TEMPERATURE, HUMIDITY, PM2_5):
			return value or 0
		return value

	async def connect(self) -> None:
		logger.info("Connecting to purifier %s (%s)", self.address, self.model)
		try:
			state = await self._status()
		except DeviceError as e:
			raise ConnectionEstablishmentFailure(self.address, e) from e
		logger.info("Connected to purifier %s: %s", self.address, state)

	async def refresh(self) -> None:
		await self._status()

	async def get_power(self) -> bool:
		return await self._read(POWER)

	async def set_power(self, value: bool) -> bool:
		await self._call(self._device.on if value else self._device.off)
		self.update({POWER: bool(value)})
		return value

	async def get_mode(self) -> PurifierMode:
		return await self._read(MODE)

	async def set_mode(self, value: PurifierMode) -> PurifierMode:
		mode = OperationMode(value.value)
		await self._call(self._device.set_mode, mode)
		self.update({MODE: mode.value})
		return value

	async def get_favorite_level(self) -> int:
		return await self._read(FAVORITE_LEVEL)

	async def set_favorite_level(self, value: int) -> int:
		if not 0 <= value <= MAX_FAVORITE_LEVEL:
			raise ValueError(f"Favorite level out of range: {value}")
		await self._call(self._device.set_favorite_level, value)
		self.update({FAVORITE_LEVEL: value})
		return value

	async def get_temperature(self) -> float:
		return await self._read(TEMPERATURE)

	async def get_humidity(self) -> int:
		return await self._read(HUMIDITY)

	async def get_pm2_5(self) -> int:
		return await self._read(PM2_5)

	async def get_led_brightness(self) -> LedBrightness:
		return await self._read(LED_BRIGHTNESS)

	async def set_led_brightness(self, value: LedBrightness) -> LedBrightness:
		level = LED_BRIGHTNESS_LEVELS[value]
		await self._call(self._device.set_led_brightness, level)
		self.update({LED_BRIGHTNESS: level.value})
		return value
