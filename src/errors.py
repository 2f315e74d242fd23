"""Errors reported back to the characteristic registry."""


class PurifierError(Exception):
	pass


class ConnectionUnavailable(PurifierError):
	"""No device session: raised before any I/O is attempted."""

	def __init__(self, name: str):
		super().__init__(f"{name} is not connected!")
		self.name = name


class ConnectionEstablishmentFailure(PurifierError):
	"""The startup connection could not be established."""

	def __init__(self, address: str, cause: Exception):
		super().__init__(f"Could not connect to {address}: {cause}")
		self.address = address
		self.cause = cause


class DeviceCommandFailure(PurifierError):
	"""A get/set issued to the device was rejected."""

	def __init__(self, action: str, operation: str, cause: Exception):
		super().__init__(f"Error {action}: {cause}")
		self.action = action
		self.operation = operation
		self.cause = cause
