"""
Accessory policies and the mapping between external actions and device modes.

Policies ("accessory modes"):

  Every policy can enable MANUAL (favorite mode), and setting the rotation
  speed always switches the purifier to favorite mode first.

  0:
    - No way to enable silent mode
    - Accessory power on/off turns the purifier on/off
  1:
    - Silent mode is toggled by a separate switch service
    - Accessory power on/off turns the purifier on/off
  2:
    - The purifier is never powered off
    - Accessory power off puts the purifier in silent mode; silent and idle
      are reported as inactive
  3:
    - Accessory power on/off turns the purifier on/off
    - Target state MANUAL puts the purifier in silent mode, so silent is
      reported as MANUAL as well
"""

import logging
import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from devices import DeviceError, PurifierDevice, PurifierMode
from errors import DeviceCommandFailure
from .characteristics import TargetAirPurifierState

logger = logging.getLogger(__name__)

LEVEL_STEP = 6.25  # rotation speed percent per favorite level


class AccessoryPolicy(IntEnum):
	STANDARD = 0
	SILENT_SWITCH = 1
	NO_POWER_OFF = 2
	SILENT_IS_MANUAL = 3

	@property
	def has_silent_switch(self) -> bool:
		return self == AccessoryPolicy.SILENT_SWITCH

	@property
	def allows_power_off(self) -> bool:
		return self != AccessoryPolicy.NO_POWER_OFF

	@property
	def manual_mode(self) -> PurifierMode:
		if self == AccessoryPolicy.SILENT_IS_MANUAL:
			return PurifierMode.SILENT
		return PurifierMode.FAVORITE


@dataclass(frozen=True)
class DeviceCommand:
	operation: str
	argument: Any
	action: str
	best_effort: bool = False

	async def run(self, device: PurifierDevice) -> Any:
		"""Issue the command, wrapping device rejections in DeviceCommandFailure."""
		logger.debug("Sending %s(%s) (%s)", self.operation, self.argument, self.action)
		try:
			return await getattr(device, self.operation)(self.argument)
		except (DeviceError, ValueError) as e:
			raise DeviceCommandFailure(self.action, self.operation, e) from e


def speed_to_level(percent: float) -> int:
	return math.ceil(percent / LEVEL_STEP)


def level_to_speed(level: int) -> float:
	return level * LEVEL_STEP


class ModePolicyEngine:
	def __init__(self, policy: AccessoryPolicy):
		self.policy = policy

	def decide_activation(self, active: bool) -> DeviceCommand:
		if not active and not self.policy.allows_power_off:
			return DeviceCommand("set_mode", PurifierMode.SILENT, "changing active state (setting SILENT)")
		return DeviceCommand("set_power", bool(active), "setting active state (power)")

	def decide_target_state(self, target: TargetAirPurifierState) -> DeviceCommand:
		mode = PurifierMode.AUTO if target == TargetAirPurifierState.AUTO else self.policy.manual_mode
		return DeviceCommand("set_mode", mode, "setting target state")

	def decide_rotation_speed(self, percent: float, current_mode: PurifierMode | None) -> list[DeviceCommand]:
		"""
		Commands for a rotation speed change.

		The switch to favorite mode, when needed, is best effort: only the
		favorite level command decides the outcome of the request.
		``current_mode`` is None when the mode could not be read; the switch is
		then skipped.
		"""
		if not 0 <= percent <= 100:
			raise ValueError(f"Rotation speed out of range: {percent}")
		commands = []
		if current_mode is not None and current_mode != PurifierMode.FAVORITE:
			commands.append(DeviceCommand(
				"set_mode", PurifierMode.FAVORITE, "switching to favorite mode", best_effort=True))
		commands.append(DeviceCommand("set_favorite_level", speed_to_level(percent), "setting rotation speed"))
		return commands

	def decide_aux_switch(self, on: bool) -> DeviceCommand:
		if not self.policy.has_silent_switch:
			raise ValueError(f"Policy {self.policy.value} has no silent switch")
		return DeviceCommand("set_mode", PurifierMode.SILENT if on else PurifierMode.AUTO, "setting silent mode")

	def reads_activation_from_mode(self) -> bool:
		return not self.policy.allows_power_off

	def read_activation(self, mode: PurifierMode | None, power: bool | None) -> bool:
		if self.reads_activation_from_mode():
			return mode not in (PurifierMode.SILENT, PurifierMode.IDLE)
		return bool(power)
