"""Scanning for train hubs, connecting to them and sending motor and LED commands."""

from __future__ import annotations

import abc
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from legotrain.deviceinfo import DeviceInfo, DiscoveredDevice
from legotrain.protocol import (
    COMM_SERVICE_UUID,
    CONTROL_UUID,
    BatteryLevelEvent,
    BatteryTypeEvent,
    Event,
    build_frame,
    battery_update_command,
    led_color_commands,
    parse_notification,
    power_command,
)

log = logging.getLogger(__name__)

SCAN_TIMEOUT_MS = 10000
NAME_FILTER = "Train"
MAX_HUBS = 5
# Only the first four hubs have a notification handler that reports data.
_REPORTING_HUBS = 4


class ScanError(Enum):
    POWERED_OFF = auto()
    INPUT_OUTPUT = auto()
    UNKNOWN = auto()


_SCAN_ERROR_MESSAGES = {
    ScanError.POWERED_OFF: "The Bluetooth adaptor is powered off.",
    ScanError.INPUT_OUTPUT: "Writing or reading from the device resulted in an error.",
}


class ServiceState(Enum):
    INVALID = auto()
    REMOTE_SERVICE = auto()
    REMOTE_SERVICE_DISCOVERING = auto()
    REMOTE_SERVICE_DISCOVERED = auto()
    LOCAL_SERVICE = auto()


class Signal:
    """A list of callbacks that are all called on emit."""

    def __init__(self) -> None:
        self._callbacks: list[Callable[..., Any]] = []

    def connect(self, callback: Callable[..., Any]) -> Callable[[], None]:
        """Register ``callback``; return a function that removes it again."""
        self._callbacks.append(callback)

        def disconnect() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return disconnect

    def emit(self, *args: Any) -> None:
        for callback in list(self._callbacks):
            callback(*args)


class BluetoothBackend(abc.ABC):
    """The Bluetooth stack the device manager drives; links are numbered from 0."""

    @abc.abstractmethod
    def start_scan(self, timeout_ms: int) -> None:
        """Start a low-energy scan."""

    @abc.abstractmethod
    def connect(self, link: int, device: DiscoveredDevice) -> None:
        """Open a connection to ``device`` (random address type) as ``link``."""

    @abc.abstractmethod
    def is_connected(self, link: int) -> bool:
        """Whether the link is in any state other than unconnected."""

    @abc.abstractmethod
    def disconnect(self, link: int) -> None:
        """Close the connection of ``link``."""

    @abc.abstractmethod
    def discover_services(self, link: int) -> None:
        """Start service discovery on a connected link."""

    @abc.abstractmethod
    def open_service(self, link: int, service_uuid: str) -> bool:
        """Create the service object; return False if it cannot be created."""

    @abc.abstractmethod
    def close_service(self, link: int) -> None:
        """Drop the service object of ``link`` if there is one."""

    @abc.abstractmethod
    def discover_service_details(self, link: int) -> None:
        """Start discovering the characteristics of the open service."""

    @abc.abstractmethod
    def has_characteristic(self, link: int, characteristic_uuid: str) -> bool:
        """Whether the open service holds the characteristic."""

    @abc.abstractmethod
    def enable_notifications(self, link: int, characteristic_uuid: str) -> bool:
        """Write 0100 to the characteristic's client configuration descriptor.

        Return False if the descriptor does not exist.
        """

    @abc.abstractmethod
    def write_characteristic(self, link: int, characteristic_uuid: str, value: bytes) -> None:
        """Write ``value`` without response."""


@dataclass
class _Link:
    device: DeviceInfo
    found_service: bool = False
    service_open: bool = False


class BLEDevice:
    """Finds train hubs, connects to them and exchanges control messages."""

    def __init__(
        self,
        backend: BluetoothBackend,
        scan_timeout_ms: int = SCAN_TIMEOUT_MS,
        write_delay: float = 0.01,
    ) -> None:
        self.backend = backend
        self.scan_timeout_ms = scan_timeout_ms
        self.write_delay = write_delay
        self.devices: list[DeviceInfo] = []
        self.found_devices: list[str] = []
        self.current_device: DeviceInfo | None = None
        self.controller_index = 0
        self.running = False
        self._links: list[_Link] = []
        self._device_list_model: list[str] = []

        self.new_data = Signal()
        self.scanning_finished = Signal()
        self.connection_start = Signal()
        self.connection_end = Signal()
        self.device_list_model_changed = Signal()
        self.devices_ready = Signal()
        self.battery_level = Signal()
        self.status_change = Signal()

    @property
    def device_list_model(self) -> list[str]:
        return list(self._device_list_model)

    @device_list_model.setter
    def device_list_model(self, names: list[str]) -> None:
        names = list(names)
        if names == self._device_list_model:
            return
        self._device_list_model = names
        self.device_list_model_changed.emit(list(names))

    @property
    def link_count(self) -> int:
        return len(self._links)

    def _status(self, message: str) -> None:
        log.debug("%s", message)
        self.status_change.emit(message)

    def reset_device_list_model(self) -> None:
        self._device_list_model = []
        self.device_list_model_changed.emit([])

    def start_scan(self) -> None:
        self.devices.clear()
        self.found_devices.clear()
        self.reset_device_list_model()
        self.backend.start_scan(self.scan_timeout_ms)
        self._status("Searching for BLE devices...")

    def add_device(self, device: DiscoveredDevice) -> bool:
        """Record a scanned device if it is a new low-energy train hub."""
        if not device.low_energy:
            return False
        log.debug(
            "Discovered device: %s address: %s RSSI: %s dBm",
            device.name, device.address, device.rssi,
        )
        if device.name in self.found_devices or NAME_FILTER not in device.name:
            return False
        self.found_devices.append(device.name)
        self.devices.append(DeviceInfo(device))
        for data in device.manufacturer_data.values():
            log.debug("manufacturer data: %s", data.hex("-"))
        return True

    def scan_finished(self) -> None:
        self.device_list_model = list(self.found_devices)
        self.scanning_finished.emit()
        self._status(f"Devices found: {len(self.found_devices)}")

    def scan_error(self, error: ScanError) -> None:
        self._status(_SCAN_ERROR_MESSAGES.get(error, "An unknown error has occurred."))

    def start_connect(self, index: int) -> None:
        """Connect to the device found at ``index`` in the scan results."""
        info = self.devices[index]
        self.current_device = DeviceInfo(info.device)
        self._links.append(_Link(info))
        self.controller_index = len(self._links) - 1
        self.backend.connect(self.controller_index, info.device)
        count = len(self._links)
        self._status(f"Controller state: [{count} {count} {count}]")

    def disconnect_from_device(self) -> None:
        for link_index in range(len(self._links)):
            if self.backend.is_connected(link_index):
                self.backend.disconnect(link_index)
            else:
                self.device_disconnected()
        for link_index, link in enumerate(self._links):
            if link.service_open:
                self.backend.close_service(link_index)
        self._links.clear()
        self.running = False
        self.connection_end.emit()

    def device_connected(self) -> None:
        log.debug("Device connected")
        self.backend.discover_services(self.controller_index)

    def device_disconnected(self) -> None:
        self._status("Remote device disconnected")

    def service_discovered(self, uuid: str) -> None:
        if uuid.lower() == COMM_SERVICE_UUID:
            self._links[self.controller_index].found_service = True
            log.debug("Sensor service found")

    def service_scan_done(self) -> None:
        self._status("Services Scan Done")
        index = self.controller_index
        link = self._links[index]
        if link.service_open:
            self.backend.close_service(index)
            link.service_open = False
        if link.found_service:
            link.service_open = self.backend.open_service(index, COMM_SERVICE_UUID)
        if not link.service_open:
            log.debug("Sensor service not found")
            self.disconnect_from_device()
            return
        self.backend.discover_service_details(index)

    def controller_error(self, error: Any) -> None:
        self._status(f"Controller Error: {error}")

    def service_state_changed(self, state: ServiceState) -> None:
        if state is not ServiceState.REMOTE_SERVICE_DISCOVERED:
            return
        index = self.controller_index
        if not self.backend.has_characteristic(index, CONTROL_UUID):
            log.debug("Sensor characteristic not found")
            return
        if self.backend.enable_notifications(index, CONTROL_UUID):
            log.debug("Notification enabled")
            self.connection_start.emit()
            if index == len(self.found_devices) - 1 and index < MAX_HUBS:
                self.devices_ready.emit()

    def update_data(self, index: int, characteristic_uuid: str, value: bytes) -> Event | None:
        """Handle a notification from hub ``index``; return the decoded event."""
        if index >= _REPORTING_HUBS or characteristic_uuid.lower() != CONTROL_UUID:
            return None
        log.debug("notification: %s", bytes(value).hex("-"))
        event = parse_notification(bytes(value))
        if isinstance(event, BatteryLevelEvent):
            log.debug("battery level: %d %%", event.level)
            self.battery_level.emit(event.level, index)
        elif isinstance(event, BatteryTypeEvent):
            log.debug("battery type: %d", event.battery_type)
        return event

    def write_data(self, index: int, value: bytes) -> None:
        if self._links[index].service_open:
            self.backend.write_characteristic(index, CONTROL_UUID, bytes(value))

    def write_frame(self, index: int, payload: bytes) -> bytes:
        """Frame ``payload`` and send it to hub ``index`` if it is linked."""
        frame = build_frame(payload)
        log.debug("frame: %s", frame.hex("-"))
        if 0 <= index < len(self._links):
            self.write_data(index, frame)
        if self.write_delay > 0:
            time.sleep(self.write_delay)
        return frame

    def set_power(self, index: int, power: int) -> None:
        self.write_frame(index, power_command(power))

    def set_led_color(self, index: int, red: int, green: int, blue: int) -> None:
        for payload in led_color_commands(red, green, blue):
            self.write_frame(index, payload)

    def set_battery_update(self, index: int) -> None:
        self.write_frame(index, battery_update_command())

    def start_acquisition(self, state: bool) -> None:
        """Show the run state on hub 0's LED: red when running, green otherwise."""
        self.set_led_color(0, 255 if state else 0, 0 if state else 255, 0)