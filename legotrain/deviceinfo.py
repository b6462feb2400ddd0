"""Information about a discovered Bluetooth device."""

from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class DiscoveredDevice:
    """What a scan reports about one remote device."""

    name: str
    address: str
    rssi: int = 0
    device_uuid: str | None = None
    low_energy: bool = True
    manufacturer_data: dict[int, bytes] = field(default_factory=dict)


class DeviceInfo:
    """Holds a discovered device and notifies subscribers when it is replaced."""

    def __init__(self, device: DiscoveredDevice) -> None:
        self._device = device
        self._callbacks: list[Callable[[], None]] = []

    @property
    def device(self) -> DiscoveredDevice:
        return self._device

    @property
    def name(self) -> str:
        return self._device.name

    @property
    def address(self) -> str:
        """The device address; on macOS the system UUID stands in for it."""
        if sys.platform == "darwin" and self._device.device_uuid:
            return self._device.device_uuid
        return self._device.address

    def set_device(self, device: DiscoveredDevice) -> None:
        self._device = device
        for callback in list(self._callbacks):
            callback()

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Call ``callback`` whenever the device changes; return an unsubscriber."""
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe