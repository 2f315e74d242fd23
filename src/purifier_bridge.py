import asyncio
import logging
import typing
from contextlib import asynccontextmanager

import devices
from accessory import CharacteristicRegistry, PurifierAccessory
from configuration import Config
from devices import DeviceError
from errors import ConnectionEstablishmentFailure

logger = logging.getLogger(__name__)


if typing.TYPE_CHECKING:
    import mqtt


class PurifierBridge:
    def __init__(self, config: Config):
        self.config = config
        self.host = config.device.address
        self.poll_interval = config.device.poll_interval
        self.registry = CharacteristicRegistry(config.accessory.name)
        self.accessory = PurifierAccessory(config.accessory, self.registry)
        self.device = devices.create(config.device)
        self.connected = False

    async def connect(self) -> bool:
        """
        Establish the device session once. A failure is final: the accessory
        keeps answering "not connected" for the rest of the process.
        """
        try:
            await self.device.connect()
        except ConnectionEstablishmentFailure as e:
            logger.error("Error connecting: %s", e)
            logger.error("%s not connected! Are the address and token right?", self.accessory.name)
            return False
        self.accessory.attach(self.device)
        self.connected = True
        logger.info("Connection to %s inited", self.accessory.name)
        return True

    async def shutdown(self) -> None:
        self.accessory.detach()
        if self.connected:
            await self.device.disconnect()
            self.connected = False

    async def update_status_from_device(self) -> None:
        logger.debug("Requesting status for %s", self.host)
        try:
            await self.device.refresh()
        except (DeviceError, ValueError) as e:
            logger.warning("Skipping status update of %s: %s", self.host, e)

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval)
            await self.update_status_from_device()

    async def observe(self, publisher: 'mqtt.Connection') -> None:
        logger.info("Observing purifier %s", self.host)
        if await self.connect():
            await publisher.publish_online()
        else:
            await publisher.publish_offline()
        async with asyncio.TaskGroup() as task_group:
            task_group.create_task(self.accessory.prober.run())
            if self.connected:
                task_group.create_task(self._poll())

    @staticmethod
    @asynccontextmanager
    async def create(config: Config):
        bridge = PurifierBridge(config)
        yield bridge
        await bridge.shutdown()
