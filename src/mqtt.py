import asyncio
import datetime
import logging
import re
import typing
from contextlib import asynccontextmanager
from typing import Any

import aiomqtt
from aiomqtt import MqttCodeError

from accessory.characteristics import Characteristic, Service, format_value, parse_value
from configuration import MqttConfig
from errors import PurifierError

if typing.TYPE_CHECKING:
	from accessory import CharacteristicRegistry


logger = logging.getLogger(__name__)

Payload = int | float | str | bool | None


class Connection:
	"""
	Publishes the characteristics of one accessory under
	``<root>/<accessory>/<Service>/<Characteristic>`` and accepts
	``.../set`` and ``.../get`` requests, plus ``<root>/<accessory>/identify``.
	"""

	def __init__(self, config: MqttConfig, accessory_topic: str):
		self.connected = False
		self.client = aiomqtt.Client(config.host, config.port)
		self.server = config.host
		self.port = config.port
		self.root = f"{config.root}/{accessory_topic}"
		self.last_states: dict[str, Payload] = {}
		self.connection_lock = asyncio.Lock()
		self.pending: asyncio.Queue[tuple[str, Payload]] = asyncio.Queue()

	async def _connect(self):
		async with self.connection_lock:
			if self.connected:
				return
			logger.info("Connecting to %s...", self.server)
			await self.client.__aenter__()
			self.connected = True

	async def _disconnect(self):
		async with self.connection_lock:
			if not self.connected:
				return
			logger.info("Disconnecting from %s...", self.server)
			try:
				await self.client.__aexit__(None, None, None)
			except MqttCodeError as e:
				logger.warning("Could not disconnect, marking it as disconnected anyways. Error: %s", e)
			self.connected = False

	async def _publish(self, key: str, payload: Payload) -> bool:
		await self._connect()
		try:
			await self.client.publish(f"{self.root}/{key}", payload=payload, retain=False)
		except (MqttCodeError, TypeError) as e:
			logger.error("Could not publish payload [%s]: [%s]", payload, e)
			await self._disconnect()
			return False
		return True

	def attach(self, registry: 'CharacteristicRegistry') -> None:
		"""Publish every registered characteristic now, and every change from now on."""
		registry.add_listener(self._queue_update)
		for service, characteristic in registry.characteristics():
			self._queue_update(service, characteristic, registry.value(service, characteristic))

	def _queue_update(self, service: Service, characteristic: Characteristic, value: Any) -> None:
		self.pending.put_nowait((f"{service.value}/{characteristic.value}", format_value(value)))

	async def publish_updates(self) -> None:
		while True:
			key, value = await self.pending.get()
			if key in self.last_states and value == self.last_states[key]:
				continue
			logger.debug("Publishing characteristic %s: %s", key, value)
			if await self._publish(key, value):
				self.last_states[key] = value

	async def observe(self, registry: 'CharacteristicRegistry') -> None:
		while True:
			await self._connect()
			try:
				await self.client.subscribe(f"{self.root}/+/+/set")
				await self.client.subscribe(f"{self.root}/+/+/get")
				await self.client.subscribe(f"{self.root}/identify")
				async for message in self.client.messages:
					payload = message.payload.decode() if isinstance(message.payload, bytes) else str(message.payload or "")
					await self.handle_message(registry, message.topic.value, payload)
			except (MqttCodeError, TypeError) as e:
				logger.error("Error while observing topics: [%s]", e, exc_info=e)
				await self._disconnect()

	async def handle_message(self, registry: 'CharacteristicRegistry', topic: str, payload: str) -> None:
		if topic == f"{self.root}/identify":
			try:
				await registry.identify()
			except PurifierError as e:
				logger.error("Identify failed: %s", e)
				await self._publish("identify/error", str(e))
			return

		matches = re.fullmatch(f"{re.escape(self.root)}/(\\w+)/(\\w+)/(set|get)", topic)
		try:
			assert matches, f"unexpected topic {topic}"
			service = Service(matches[1])
			characteristic = Characteristic(matches[2])
		except (AssertionError, ValueError) as e:
			logger.error("Could not parse MQTT message topic: [%s]: [%s]", topic, e)
			return

		key = f"{service.value}/{characteristic.value}"
		try:
			if matches[3] == "set":
				if not payload:
					return
				await registry.set(service, characteristic, parse_value(characteristic, payload))
			else:
				value = format_value(await registry.get(service, characteristic))
				if await self._publish(key, value):
					self.last_states[key] = value
		except (PurifierError, KeyError, ValueError) as e:
			logger.error("Request %s on %s failed: %s", matches[3], key, e)
			await self._publish(f"{key}/error", str(e))

	async def publish_online(self) -> None:
		await self._publish("last_update", datetime.datetime.now().isoformat())
		await self._publish("status", "ONLINE")

	async def publish_offline(self) -> None:
		await self._publish("status", "OFFLINE")

	@staticmethod
	@asynccontextmanager
	async def create(config: MqttConfig, accessory_topic: str):
		publisher = Connection(config, accessory_topic)
		yield publisher
		await publisher._disconnect()
