from accessory.characteristics import (
    AirQuality, Characteristic, CurrentAirPurifierState, Service, TargetAirPurifierState,
)
from devices import DeviceEvent, PurifierMode

PURIFIER = Service.AIR_PURIFIER


def test_attach_pushes_the_current_device_state(make_accessory, device) -> None:
    device.mode = PurifierMode.FAVORITE
    device.pm2_5 = 120
    accessory, registry, _ = make_accessory(0, device)
    assert registry.value(PURIFIER, Characteristic.ACTIVE) is True
    assert registry.value(PURIFIER, Characteristic.CURRENT_AIR_PURIFIER_STATE) == CurrentAirPurifierState.PURIFYING_AIR
    assert registry.value(PURIFIER, Characteristic.TARGET_AIR_PURIFIER_STATE) == TargetAirPurifierState.MANUAL
    assert registry.value(Service.AIR_QUALITY_SENSOR, Characteristic.AIR_QUALITY) == AirQuality.FAIR
    assert registry.value(Service.TEMPERATURE_SENSOR, Characteristic.CURRENT_TEMPERATURE) == 21.5
    assert accessory.view.pm2_5_density == 120


def test_attach_in_silent_mode_is_inactive_when_power_off_is_not_allowed(make_accessory, device) -> None:
    device.mode = PurifierMode.SILENT
    accessory, registry, _ = make_accessory(2, device)
    assert registry.value(PURIFIER, Characteristic.ACTIVE) is False
    assert accessory.view.current_state == CurrentAirPurifierState.INACTIVE


def test_power_off_with_silent_switch(make_accessory, device) -> None:
    device.mode = PurifierMode.SILENT
    accessory, registry, pushes = make_accessory(1, device)
    assert registry.value(Service.SWITCH, Characteristic.ON) is True

    device.fire(DeviceEvent.POWER_CHANGED, False)

    assert pushes.values(Service.SWITCH, Characteristic.ON) == [False]
    assert pushes.values(PURIFIER, Characteristic.ACTIVE) == [False]
    assert pushes.values(PURIFIER, Characteristic.CURRENT_AIR_PURIFIER_STATE) == [CurrentAirPurifierState.INACTIVE]
    assert device.commands == []


def test_power_on_pushes_active(make_accessory, device) -> None:
    device.power = False
    accessory, registry, pushes = make_accessory(0, device)
    device.fire(DeviceEvent.POWER_CHANGED, True)
    assert pushes.values(PURIFIER, Characteristic.ACTIVE) == [True]
    assert accessory.view.current_state == CurrentAirPurifierState.PURIFYING_AIR
    assert device.commands == []


def test_mode_change_with_silent_switch(make_accessory, device) -> None:
    _, registry, pushes = make_accessory(1, device)
    device.fire(DeviceEvent.MODE_CHANGED, PurifierMode.SILENT)
    device.fire(DeviceEvent.MODE_CHANGED, PurifierMode.FAVORITE)
    assert pushes.values(Service.SWITCH, Characteristic.ON) == [True, False]
    assert pushes.values(PURIFIER, Characteristic.TARGET_AIR_PURIFIER_STATE) == [
        TargetAirPurifierState.AUTO, TargetAirPurifierState.MANUAL]
    assert pushes.values(PURIFIER, Characteristic.ACTIVE) == []


def test_mode_change_drives_activation_when_power_off_is_not_allowed(make_accessory, device) -> None:
    _, registry, pushes = make_accessory(2, device)
    device.fire(DeviceEvent.MODE_CHANGED, PurifierMode.SILENT)
    device.fire(DeviceEvent.MODE_CHANGED, PurifierMode.AUTO)
    assert pushes.values(PURIFIER, Characteristic.ACTIVE) == [False, True]
    assert pushes.values(PURIFIER, Characteristic.CURRENT_AIR_PURIFIER_STATE) == [
        CurrentAirPurifierState.INACTIVE, CurrentAirPurifierState.PURIFYING_AIR]
    assert not registry.has(Service.SWITCH, Characteristic.ON)


def test_silent_mode_is_manual_for_policy_3(make_accessory, device) -> None:
    accessory, _, pushes = make_accessory(3, device)
    device.fire(DeviceEvent.MODE_CHANGED, PurifierMode.SILENT)
    assert pushes.values(PURIFIER, Characteristic.TARGET_AIR_PURIFIER_STATE) == [TargetAirPurifierState.MANUAL]
    assert pushes.values(PURIFIER, Characteristic.ACTIVE) == []


def test_sensor_changes(make_accessory, device) -> None:
    accessory, _, pushes = make_accessory(0, device)
    device.fire(DeviceEvent.TEMPERATURE_CHANGED, 23.1)
    device.fire(DeviceEvent.HUMIDITY_CHANGED, 51)
    device.fire(DeviceEvent.PM2_5_CHANGED, 210)
    assert pushes.values(Service.TEMPERATURE_SENSOR, Characteristic.CURRENT_TEMPERATURE) == [23.1]
    assert pushes.values(Service.HUMIDITY_SENSOR, Characteristic.CURRENT_RELATIVE_HUMIDITY) == [51]
    assert pushes.values(Service.AIR_QUALITY_SENSOR, Characteristic.AIR_QUALITY) == [AirQuality.POOR]
    assert pushes.values(Service.AIR_QUALITY_SENSOR, Characteristic.PM2_5_DENSITY) == [210]
    assert device.commands == []


def test_disabled_sensors_are_not_published(make_accessory, device) -> None:
    _, registry, pushes = make_accessory(
        0, device, show_temperature=False, show_humidity=False, show_air_quality=False)
    device.fire(DeviceEvent.TEMPERATURE_CHANGED, 23.1)
    device.fire(DeviceEvent.PM2_5_CHANGED, 210)
    assert pushes == []
    assert not registry.has_service(Service.TEMPERATURE_SENSOR)
    assert not registry.has_service(Service.AIR_QUALITY_SENSOR)


def test_power_on_in_silent_mode_stays_inactive_when_power_off_is_not_allowed(make_accessory, device) -> None:
    device.power = False
    device.mode = PurifierMode.IDLE
    accessory, registry, _ = make_accessory(2, device)

    device.fire(DeviceEvent.MODE_CHANGED, PurifierMode.SILENT)
    device.fire(DeviceEvent.POWER_CHANGED, True)

    assert registry.value(PURIFIER, Characteristic.ACTIVE) is False
    assert accessory.view.current_state == CurrentAirPurifierState.INACTIVE


def test_power_before_mode_ends_in_the_mode_derived_state(make_accessory, device) -> None:
    device.power = False
    device.mode = PurifierMode.IDLE
    accessory, registry, pushes = make_accessory(2, device)

    device.fire(DeviceEvent.POWER_CHANGED, True)
    device.fire(DeviceEvent.MODE_CHANGED, PurifierMode.AUTO)

    assert pushes.values(PURIFIER, Characteristic.ACTIVE) == [False, True]
    assert accessory.view.current_state == CurrentAirPurifierState.PURIFYING_AIR
