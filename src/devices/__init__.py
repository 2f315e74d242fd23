from configuration import DeviceConfig
from .purifier_device import (
	DeviceError, DeviceEvent, LedBrightness, PurifierDevice, PurifierMode,
)

MIIO_PURIFIER_MODELS = {
	"zhimi.airpurifier.m1",
	"zhimi.airpurifier.m2",
	"zhimi.airpurifier.ma1",
	"zhimi.airpurifier.ma2",
	"zhimi.airpurifier.sa1",
	"zhimi.airpurifier.sa2",
	"zhimi.airpurifier.v1",
	"zhimi.airpurifier.v2",
	"zhimi.airpurifier.v3",
	"zhimi.airpurifier.v5",
	"zhimi.airpurifier.v6",
	"zhimi.airpurifier.v7",
}


def create(config: DeviceConfig) -> PurifierDevice:
	if config.model in MIIO_PURIFIER_MODELS:
		from devices.miio_purifier import MiioPurifier
		return MiioPurifier(config.address, config.token, config.model, config.timeout)
	raise ValueError(f"Unknown device model: {config.model}")
