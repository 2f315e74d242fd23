"""
Load configuration from file

Actual file name is taken from environment and can be overridden

Example content:

```yaml
version: 1

device:
	address: "192.168.1.77"
	token: "2b26525b0674c61e1893bc74fd2f38d6"
	model: "zhimi.airpurifier.m1"
	poll_interval: 30

accessory:
	name: "Air Purifier 2"
	manufacturer: "Xiaomi"
	serial_number: "12345678"
	firmware: "1.2.4"
	policy: 2
	show_temperature: true
	show_humidity: true
	show_air_quality: true

mqtt:
	host: "mqttbroker"
	port: 1883
	root: "purifiers"
```
"""

import logging
import os
import re
from dataclasses import dataclass, field

import yaml

logger = logging.getLogger(__name__)

POLICIES = range(4)


@dataclass(frozen=True)
class DeviceConfig:
	address: str
	token: str = field(repr=False)
	model: str = "zhimi.airpurifier.m1"
	poll_interval: int = 30
	timeout: int | None = None


@dataclass(frozen=True)
class AccessoryConfig:
	name: str = "Air Purifier 2"
	manufacturer: str = "Xiaomi"
	model: str = "zhimi.airpurifier.m1"
	serial_number: str = "12345678"
	firmware: str = "1.2.4"
	policy: int = 2
	show_temperature: bool = True
	show_humidity: bool = True
	show_air_quality: bool = True
	keepalive_interval: int = 300

	def __post_init__(self):
		if self.policy not in POLICIES:
			raise ValueError(f"Accessory policy must be one of {list(POLICIES)}, got {self.policy}")

	@property
	def topic(self) -> str:
		return re.sub(r"[^a-z0-9]+", "_", self.name.lower()).strip("_")


@dataclass(frozen=True)
class MqttConfig:
	host: str
	root: str
	port: int = 1883


@dataclass(frozen=True)
class Config:
	mqtt: MqttConfig
	device: DeviceConfig
	accessory: AccessoryConfig


def get_config() -> Config | None:
	try:
		config_file = os.getenv('CONFIG_FILE', 'config.loc.yaml')
		with open(config_file) as f_config:
			config_dict = yaml.load(f_config, Loader=yaml.FullLoader)
		device_config = DeviceConfig(**config_dict['device'])
		accessory_config = AccessoryConfig(
			**{'model': device_config.model, **config_dict.get('accessory', {})})
		mqtt_config = MqttConfig(**config_dict['mqtt'])
		configuration = Config(mqtt=mqtt_config, device=device_config, accessory=accessory_config)
		logger.info(f"Loaded configuration: {configuration}")
		return configuration
	except (FileNotFoundError, KeyError, TypeError, ValueError) as ex:
		logger.fatal(f"Could not load configuration: {ex}", exc_info=ex)
		return None
