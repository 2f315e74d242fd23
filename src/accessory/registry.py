"""
In-process characteristic registry.

Holds the externally visible value of every registered characteristic,
together with the get/set handlers that resolve reads and writes against the
device. Handlers report back through a completion callback
``callback(error=None, value=None)``; the registry turns that into an awaited
result so callers (the MQTT connection, the tests) can simply ``await``.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

from .characteristics import Characteristic, Service

logger = logging.getLogger(__name__)

Callback = Callable[..., None]
GetHandler = Callable[[Callback], Awaitable[None]]
SetHandler = Callable[[Any, Callback], Awaitable[None]]
IdentifyHandler = Callable[[bool, Callback], Awaitable[None]]
Listener = Callable[[Service, Characteristic, Any], None]
Key = tuple[Service, Characteristic]


class CharacteristicRegistry:
	def __init__(self, accessory_name: str):
		self.accessory_name = accessory_name
		self._values: dict[Key, Any] = {}
		self._getters: dict[Key, GetHandler] = {}
		self._setters: dict[Key, SetHandler] = {}
		self._listeners: list[Listener] = []
		self._identify: IdentifyHandler | None = None

	def add_service(self, service: Service, characteristics: dict[Characteristic, Any]) -> None:
		for characteristic, initial in characteristics.items():
			self._values[(service, characteristic)] = initial

	def has(self, service: Service, characteristic: Characteristic) -> bool:
		return (service, characteristic) in self._values

	def has_service(self, service: Service) -> bool:
		return any(s == service for s, _ in self._values)

	def characteristics(self) -> list[Key]:
		return list(self._values)

	def _key(self, service: Service, characteristic: Characteristic) -> Key:
		key = (service, characteristic)
		if key not in self._values:
			raise KeyError(f"{service.value}.{characteristic.value} is not registered")
		return key

	def on_get(self, service: Service, characteristic: Characteristic, handler: GetHandler) -> None:
		self._getters[self._key(service, characteristic)] = handler

	def on_set(self, service: Service, characteristic: Characteristic, handler: SetHandler) -> None:
		self._setters[self._key(service, characteristic)] = handler

	def on_identify(self, handler: IdentifyHandler) -> None:
		self._identify = handler

	def add_listener(self, listener: Listener) -> None:
		self._listeners.append(listener)

	def value(self, service: Service, characteristic: Characteristic) -> Any:
		return self._values[self._key(service, characteristic)]

	def update_value(self, service: Service, characteristic: Characteristic, value: Any) -> None:
		"""Store a new value and push it to every listener."""
		key = self._key(service, characteristic)
		self._values[key] = value
		logger.debug("Update %s.%s = %s", service.value, characteristic.value, value)
		for listener in self._listeners:
			listener(service, characteristic, value)

	@staticmethod
	def _completion() -> tuple[asyncio.Future, Callback]:
		future = asyncio.get_running_loop().create_future()

		def callback(error: Exception | None = None, value: Any = None) -> None:
			if future.done():
				logger.warning("Completion callback invoked twice (error=%s)", error)
				return
			if error is not None:
				future.set_exception(error)
			else:
				future.set_result(value)

		return future, callback

	async def get(self, service: Service, characteristic: Characteristic) -> Any:
		key = self._key(service, characteristic)
		handler = self._getters.get(key)
		if handler is None:
			return self._values[key]
		future, callback = self._completion()
		await handler(callback)
		value = await future
		self._values[key] = value
		return value

	async def set(self, service: Service, characteristic: Characteristic, value: Any) -> None:
		key = self._key(service, characteristic)
		handler = self._setters.get(key)
		if handler is None:
			raise ValueError(f"{service.value}.{characteristic.value} is read only")
		future, callback = self._completion()
		await handler(value, callback)
		# handlers may report the value actually applied
		applied = await future
		self.update_value(service, characteristic, value if applied is None else applied)

	async def identify(self, paired: bool = True) -> None:
		if self._identify is None:
			return
		future, callback = self._completion()
		await self._identify(paired, callback)
		await future
