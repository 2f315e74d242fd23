"""Pytest configuration and fakes for the purifier bridge tests."""

from typing import Any

import pytest

from accessory import CharacteristicRegistry, PurifierAccessory
from configuration import AccessoryConfig
from devices import DeviceError, DeviceEvent, LedBrightness, PurifierDevice, PurifierMode


class FakePurifier(PurifierDevice):
    """In-memory purifier recording every command sent to it."""

    def __init__(
        self,
        power: bool = True,
        mode: PurifierMode = PurifierMode.AUTO,
        favorite_level: int = 4,
        temperature: float = 21.5,
        humidity: int = 45,
        pm2_5: int = 12,
        led: LedBrightness = LedBrightness.BRIGHT,
    ) -> None:
        super().__init__()
        self.power = power
        self.mode = mode
        self.favorite_level = favorite_level
        self.temperature = temperature
        self.humidity = humidity
        self.pm2_5 = pm2_5
        self.led = led
        self.commands: list[tuple[str, Any]] = []
        self.reads: list[str] = []
        self.failing: set[str] = set()

    def fire(self, event: DeviceEvent, value: Any) -> None:
        self._emit(event, value)

    def snapshot(self) -> dict[DeviceEvent, Any]:
        return {
            DeviceEvent.POWER_CHANGED: self.power,
            DeviceEvent.MODE_CHANGED: self.mode,
            DeviceEvent.TEMPERATURE_CHANGED: self.temperature,
            DeviceEvent.HUMIDITY_CHANGED: self.humidity,
            DeviceEvent.PM2_5_CHANGED: self.pm2_5,
        }

    def _check(self, operation: str) -> None:
        if operation in self.failing:
            raise DeviceError(f"{operation} timed out")

    async def _read(self, operation: str, value: Any) -> Any:
        self.reads.append(operation)
        self._check(operation)
        return value

    async def _write(self, operation: str, value: Any) -> Any:
        self.commands.append((operation, value))
        self._check(operation)
        return value

    async def connect(self) -> None:
        pass

    async def refresh(self) -> None:
        pass

    async def get_power(self) -> bool:
        return await self._read("get_power", self.power)

    async def set_power(self, value: bool) -> bool:
        self.power = await self._write("set_power", value)
        return value

    async def get_mode(self) -> PurifierMode:
        return await self._read("get_mode", self.mode)

    async def set_mode(self, value: PurifierMode) -> PurifierMode:
        self.mode = await self._write("set_mode", value)
        return value

    async def get_favorite_level(self) -> int:
        return await self._read("get_favorite_level", self.favorite_level)

    async def set_favorite_level(self, value: int) -> int:
        self.favorite_level = await self._write("set_favorite_level", value)
        return value

    async def get_temperature(self) -> float:
        return await self._read("get_temperature", self.temperature)

    async def get_humidity(self) -> int:
        return await self._read("get_humidity", self.humidity)

    async def get_pm2_5(self) -> int:
        return await self._read("get_pm2_5", self.pm2_5)

    async def get_led_brightness(self) -> LedBrightness:
        return await self._read("get_led_brightness", self.led)

    async def set_led_brightness(self, value: LedBrightness) -> LedBrightness:
        self.led = await self._write("set_led_brightness", value)
        return value


class Pushes(list):
    """Registry listener collecting (service, characteristic, value) pushes."""

    def __call__(self, service, characteristic, value) -> None:
        self.append((service, characteristic, value))

    def values(self, service, characteristic) -> list:
        return [v for s, c, v in self if (s, c) == (service, characteristic)]


class Completion:
    """Completion callback recording what it was called with."""

    def __init__(self) -> None:
        self.calls: list[tuple[Exception | None, Any]] = []

    def __call__(self, error: Exception | None = None, value: Any = None) -> None:
        self.calls.append((error, value))

    @property
    def error(self) -> Exception | None:
        assert len(self.calls) == 1
        return self.calls[0][0]

    @property
    def value(self) -> Any:
        assert len(self.calls) == 1
        return self.calls[0][1]


@pytest.fixture
def device() -> FakePurifier:
    return FakePurifier()


@pytest.fixture
def make_accessory():
    """Build an accessory for a policy; the device is attached unless None."""

    def _make(policy: int, device: FakePurifier | None = None, **config: Any):
        registry = CharacteristicRegistry("Air Purifier 2")
        accessory = PurifierAccessory(AccessoryConfig(policy=policy, **config), registry)
        if device is not None:
            accessory.attach(device)
        pushes = Pushes()
        registry.add_listener(pushes)
        return accessory, registry, pushes

    return _make
