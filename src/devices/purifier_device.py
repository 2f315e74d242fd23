import logging
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)

RawValue = int | float | str | None
RawStatus = dict[str, RawValue]
EventHandler = Callable[[Any], None]


class DeviceError(Exception):
	"""A request was rejected by the purifier or never reached it."""


class PurifierMode(Enum):
	IDLE = "idle"
	AUTO = "auto"
	SILENT = "silent"
	FAVORITE = "favorite"
	# fixed fan presets of some models
	MEDIUM = "medium"
	HIGH = "high"
	STRONG = "strong"


class LedBrightness(Enum):
	BRIGHT = "bright"
	DIM = "dim"
	OFF = "off"

	def next(self) -> 'LedBrightness':
		members = list(LedBrightness)
		return members[(members.index(self) + 1) % len(members)]


class DeviceEvent(Enum):
	TEMPERATURE_CHANGED = "temperature_changed"
	HUMIDITY_CHANGED = "humidity_changed"
	PM2_5_CHANGED = "pm2_5_changed"
	MODE_CHANGED = "mode_changed"
	POWER_CHANGED = "power_changed"


class PurifierDevice:
	"""
	Base for a purifier session.

	Keeps the last raw status seen from the device and notifies subscribers
	when a property changes. Subclasses provide the transport and the mapping
	of raw properties to events.
	"""

	# raw property name -> event emitted when it changes
	EVENTS: dict[str, DeviceEvent] = {}

	def __init__(self) -> None:
		self._state: RawStatus = {}
		self._handlers: dict[DeviceEvent, list[EventHandler]] = {}

	def on(self, event: DeviceEvent, handler: EventHandler) -> None:
		self._handlers.setdefault(event, []).append(handler)

	def update(self, state: RawStatus) -> None:
		"""
		Merge a (partial) status and emit one event per changed property.

		Values are decoded before anything is emitted; a value that cannot be
		decoded is logged and skipped, the other changes are still emitted.
		"""
		previous = self._state
		changes = []
		if previous:
			for field, event in self.EVENTS.items():
				if field not in state or state[field] == previous.get(field):
					continue
				try:
					changes.append((event, self.decode(field, state[field])))
				except ValueError as e:
					logger.warning("Ignoring %s: %s", event.value, e)
		self._state = {**previous, **state}
		for event, value in changes:
			self._emit(event, value)

	def decode(self, field: str, value: RawValue) -> Any:
		return value

	def _emit(self, event: DeviceEvent, value: Any) -> None:
		logger.debug("%s: %s", event.value, value)
		for handler in self._handlers.get(event, []):
			handler(value)

	@property
	def raw(self) -> RawStatus:
		return self._state

	def snapshot(self) -> dict[DeviceEvent, Any]:
		"""Current value of every observed property, keyed by its change event."""
		snapshot = {}
		for field, event in self.EVENTS.items():
			if field not in self._state:
				continue
			try:
				snapshot[event] = self.decode(field, self._state[field])
			except ValueError as e:
				logger.warning("Leaving out %s: %s", event.value, e)
		return snapshot

	async def connect(self) -> None:
		raise NotImplementedError

	async def disconnect(self) -> None:
		self._state = {}

	async def refresh(self) -> None:
		raise NotImplementedError

	async def get_power(self) -> bool:
		raise NotImplementedError

	async def set_power(self, value: bool) -> bool:
		raise NotImplementedError

	async def get_mode(self) -> PurifierMode:
		raise NotImplementedError

	async def set_mode(self, value: PurifierMode) -> PurifierMode:
		raise NotImplementedError

	async def get_favorite_level(self) -> int:
		raise NotImplementedError

	async def set_favorite_level(self, value: int) -> int:
		raise NotImplementedError

	async def get_temperature(self) -> float:
		raise NotImplementedError

	async def get_humidity(self) -> int:
		raise NotImplementedError

	async def get_pm2_5(self) -> int:
		raise NotImplementedError

	async def get_led_brightness(self) -> LedBrightness:
		raise NotImplementedError

	async def set_led_brightness(self, value: LedBrightness) -> LedBrightness:
		raise NotImplementedError
