from .characteristics import AirQuality

# Evaluated top-down, first threshold reached wins
AIR_QUALITY_LEVELS = [
	(200, AirQuality.POOR),
	(150, AirQuality.INFERIOR),
	(100, AirQuality.FAIR),
	(50, AirQuality.GOOD),
	(0, AirQuality.EXCELLENT),
]


def classify(pm2_5: int | float | None) -> AirQuality:
	"""Air quality tier for a PM2.5 density in µg/m³."""
	if pm2_5 is None:
		return AirQuality.UNKNOWN
	for threshold, quality in AIR_QUALITY_LEVELS:
		if pm2_5 >= threshold:
			return quality
	return AirQuality.UNKNOWN
