import asyncio

import pytest

from accessory.characteristics import Characteristic, Service


@pytest.mark.asyncio
async def test_probe_reads_and_pushes_temperature(make_accessory, device) -> None:
    accessory, _, pushes = make_accessory(0, device)
    device.temperature = 24.0
    await accessory.prober.probe()
    assert device.reads == ["get_temperature"]
    assert pushes.values(Service.TEMPERATURE_SENSOR, Characteristic.CURRENT_TEMPERATURE) == [24.0]


@pytest.mark.asyncio
async def test_probe_reads_power_without_temperature_sensor(make_accessory, device) -> None:
    accessory, _, pushes = make_accessory(0, device, show_temperature=False)
    await accessory.prober.probe()
    assert device.reads == ["get_power"]
    assert pushes == []


@pytest.mark.asyncio
@pytest.mark.parametrize("show_temperature, operation", [(True, "get_temperature"), (False, "get_power")])
async def test_probe_failure_is_not_fatal(make_accessory, device, show_temperature, operation) -> None:
    accessory, _, pushes = make_accessory(0, device, show_temperature=show_temperature)
    device.failing.add(operation)
    await accessory.prober.probe()
    assert device.reads == [operation]
    assert pushes == []


@pytest.mark.asyncio
async def test_probe_without_device_does_nothing(make_accessory) -> None:
    accessory, _, pushes = make_accessory(0)
    await accessory.prober.probe()
    assert pushes == []


@pytest.mark.asyncio
async def test_run_probes_periodically(make_accessory, device) -> None:
    accessory, _, _ = make_accessory(0, device, keepalive_interval=0.01)
    task = asyncio.create_task(accessory.prober.run())
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert len(device.reads) >= 2
