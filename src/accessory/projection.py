from dataclasses import dataclass

from devices import PurifierMode
from .characteristics import AirQuality, CurrentAirPurifierState, TargetAirPurifierState
from .policy import AccessoryPolicy, ModePolicyEngine


@dataclass
class ExternalView:
	"""Last state pushed to the registry. Defaults hold until the device reports."""
	active: bool = False
	current_state: CurrentAirPurifierState = CurrentAirPurifierState.INACTIVE
	target_state: TargetAirPurifierState = TargetAirPurifierState.AUTO
	rotation_speed: float = 0
	aux_switch_on: bool = False
	air_quality: AirQuality = AirQuality.UNKNOWN
	pm2_5_density: int = 0
	temperature: float = 0
	humidity: int = 0


@dataclass(frozen=True)
class Projection:
	active: bool
	current_state: CurrentAirPurifierState
	target_state: TargetAirPurifierState


def current_state(active: bool) -> CurrentAirPurifierState:
	# IDLE is never reported: an active purifier is always purifying
	return CurrentAirPurifierState.PURIFYING_AIR if active else CurrentAirPurifierState.INACTIVE


def target_state(mode: PurifierMode | None, policy: AccessoryPolicy) -> TargetAirPurifierState:
	if mode == PurifierMode.FAVORITE or (mode == PurifierMode.SILENT and policy == AccessoryPolicy.SILENT_IS_MANUAL):
		return TargetAirPurifierState.MANUAL
	return TargetAirPurifierState.AUTO


def project(mode: PurifierMode | None, power: bool | None, policy: AccessoryPolicy) -> Projection:
	active = ModePolicyEngine(policy).read_activation(mode, power)
	return Projection(active, current_state(active), target_state(mode, policy))
