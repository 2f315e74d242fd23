from .characteristics import (
	AirQuality, Characteristic, CurrentAirPurifierState, Service, TargetAirPurifierState,
)
from .policy import AccessoryPolicy, ModePolicyEngine
from .purifier_accessory import PurifierAccessory
from .registry import CharacteristicRegistry
