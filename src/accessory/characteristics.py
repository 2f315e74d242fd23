from enum import Enum, IntEnum


class Service(Enum):
	ACCESSORY_INFORMATION = "AccessoryInformation"
	AIR_PURIFIER = "AirPurifier"
	SWITCH = "Switch"
	TEMPERATURE_SENSOR = "TemperatureSensor"
	HUMIDITY_SENSOR = "HumiditySensor"
	AIR_QUALITY_SENSOR = "AirQualitySensor"


class Characteristic(Enum):
	NAME = "Name"
	MANUFACTURER = "Manufacturer"
	MODEL = "Model"
	SERIAL_NUMBER = "SerialNumber"
	FIRMWARE_REVISION = "FirmwareRevision"
	ACTIVE = "Active"
	CURRENT_AIR_PURIFIER_STATE = "CurrentAirPurifierState"
	TARGET_AIR_PURIFIER_STATE = "TargetAirPurifierState"
	ROTATION_SPEED = "RotationSpeed"
	ON = "On"
	CURRENT_TEMPERATURE = "CurrentTemperature"
	CURRENT_RELATIVE_HUMIDITY = "CurrentRelativeHumidity"
	AIR_QUALITY = "AirQuality"
	PM2_5_DENSITY = "PM2_5Density"


class CurrentAirPurifierState(IntEnum):
	INACTIVE = 0
	IDLE = 1
	PURIFYING_AIR = 2


class TargetAirPurifierState(IntEnum):
	MANUAL = 0
	AUTO = 1


class AirQuality(IntEnum):
	UNKNOWN = 0
	EXCELLENT = 1
	GOOD = 2
	FAIR = 3
	INFERIOR = 4
	POOR = 5


def _parse_bool(raw: str) -> bool:
	value = raw.strip().lower()
	if value in ("1", "true", "on", "active"):
		return True
	if value in ("0", "false", "off", "inactive"):
		return False
	raise ValueError(f"Not a boolean: {raw}")


def _parse_target(raw: str) -> TargetAirPurifierState:
	value = raw.strip()
	if value.isdigit():
		return TargetAirPurifierState(int(value))
	try:
		return TargetAirPurifierState[value.upper()]
	except KeyError:
		raise ValueError(f"Invalid target state: {raw}") from None


def _parse_speed(raw: str) -> float:
	speed = float(raw)
	if not 0 <= speed <= 100:
		raise ValueError(f"Rotation speed out of range: {raw}")
	return speed


WRITABLE = {
	Characteristic.ACTIVE: _parse_bool,
	Characteristic.TARGET_AIR_PURIFIER_STATE: _parse_target,
	Characteristic.ROTATION_SPEED: _parse_speed,
	Characteristic.ON: _parse_bool,
}


def parse_value(characteristic: Characteristic, raw: str):
	"""Convert a textual write request into the characteristic's value type."""
	parser = WRITABLE.get(characteristic)
	if parser is None:
		raise ValueError(f"{characteristic.value} is read only")
	return parser(raw)


def format_value(value) -> str | int | float | None:
	if isinstance(value, Enum):
		return value.name
	if isinstance(value, bool):
		return int(value)
	return value
