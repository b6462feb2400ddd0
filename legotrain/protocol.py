"""Wire format of the hub's control characteristic: commands and notifications."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

COMM_SERVICE_UUID = "00001623-1212-efde-1623-785feabcd123"
CONTROL_UUID = "00001624-1212-efde-1623-785feabcd123"

LED_PORT = 50
MOTOR_PORT = 0x00


class MessageType(IntEnum):
    HUB_PROPERTIES = 0x01
    HUB_ACTIONS = 0x02
    HUB_ALERTS = 0x03
    HUB_ATTACHED_IO = 0x04
    GENERIC_ERROR_MESSAGES = 0x05
    HW_NETWORK_COMMANDS = 0x08
    FW_UPDATE_GO_INTO_BOOT_MODE = 0x10
    FW_UPDATE_LOCK_MEMORY = 0x11
    FW_UPDATE_LOCK_STATUS_REQUEST = 0x12
    FW_LOCK_STATUS = 0x13
    PORT_INFORMATION_REQUEST = 0x21
    PORT_MODE_INFORMATION_REQUEST = 0x22
    PORT_INPUT_FORMAT_SETUP_SINGLE = 0x41
    PORT_INPUT_FORMAT_SETUP_COMBINEDMODE = 0x42
    PORT_INFORMATION = 0x43
    PORT_MODE_INFORMATION = 0x44
    PORT_VALUE_SINGLE = 0x45
    PORT_VALUE_COMBINEDMODE = 0x46
    PORT_INPUT_FORMAT_SINGLE = 0x47
    PORT_INPUT_FORMAT_COMBINEDMODE = 0x48
    VIRTUAL_PORT_SETUP = 0x61
    PORT_OUTPUT_COMMAND = 0x81
    PORT_OUTPUT_COMMAND_FEEDBACK = 0x82


class HubPropertyReference(IntEnum):
    ADVERTISING_NAME = 0x01
    BUTTON = 0x02
    FW_VERSION = 0x03
    HW_VERSION = 0x04
    RSSI = 0x05
    BATTERY_VOLTAGE = 0x06
    BATTERY_TYPE = 0x07
    MANUFACTURER_NAME = 0x08
    RADIO_FIRMWARE_VERSION = 0x09
    LEGO_WIRELESS_PROTOCOL_VERSION = 0x0A
    SYSTEM_TYPE_ID = 0x0B
    HW_NETWORK_ID = 0x0C
    PRIMARY_MAC_ADDRESS = 0x0D
    SECONDARY_MAC_ADDRESS = 0x0E
    HARDWARE_NETWORK_FAMILY = 0x0F


class BatteryType(IntEnum):
    NORMAL = 0x00
    RECHARGEABLE = 0x01


@dataclass(frozen=True)
class AttachedIOEvent:
    """A device was attached to or detached from a hub port."""

    port: int
    connected: bool
    device_type: int | None = None


@dataclass(frozen=True)
class HubPropertyEvent:
    """A hub property update that carries no decoded value."""

    reference: HubPropertyReference | int


@dataclass(frozen=True)
class BatteryLevelEvent:
    """Battery charge in percent."""

    level: int


@dataclass(frozen=True)
class BatteryTypeEvent:
    """Kind of battery in the hub."""

    battery_type: int


Event = AttachedIOEvent | HubPropertyEvent | BatteryLevelEvent | BatteryTypeEvent


def _check_byte(name: str, value: int) -> int:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must be in 0..255, got {value}")
    return value


def build_frame(payload: bytes) -> bytes:
    """Prefix a payload with the common header: total length and hub id 0."""
    size = (len(payload) + 2) & 0xFF
    return bytes((size, 0x00)) + bytes(payload)


def power_command(power: int) -> bytes:
    """Payload that sets the motor power (-100..100) on the motor port."""
    if not -128 <= power <= 127:
        raise ValueError(f"power must fit in a signed byte, got {power}")
    return bytes((0x81, MOTOR_PORT, 0x11, 0x51, 0x00, power & 0xFF))


def led_color_commands(red: int, green: int, blue: int) -> tuple[bytes, bytes]:
    """Payloads that switch the hub LED to RGB mode and then set its colour."""
    for name, value in (("red", red), ("green", green), ("blue", blue)):
        _check_byte(name, value)
    mode = bytes((0x41, LED_PORT, 0x01, 0x01, 0x00, 0x00, 0x00, 0x00))
    colour = bytes((0x81, LED_PORT, 0x11, 0x51, 0x01, red, green, blue))
    return mode, colour


def battery_update_command() -> bytes:
    """Payload that enables battery level updates."""
    return bytes(
        (MessageType.HUB_PROPERTIES, HubPropertyReference.BATTERY_VOLTAGE, 0x02)
    )


def _require(data: bytes, length: int) -> None:
    if len(data) < length:
        raise ValueError(f"notification too short: {len(data)} bytes, need {length}")


def parse_notification(data: bytes) -> Event | None:
    """Decode a control notification; return None for unhandled message types."""
    _require(data, 3)
    message_type = data[2]

    if message_type == MessageType.HUB_ATTACHED_IO:
        _require(data, 5)
        port = data[3]
        connected = data[4] in (1, 2)
        if connected:
            _require(data, 6)
            return AttachedIOEvent(port, True, data[5])
        return AttachedIOEvent(port, False)

    if message_type == MessageType.HUB_PROPERTIES:
        _require(data, 4)
        reference = data[3]
        if reference == HubPropertyReference.BATTERY_VOLTAGE:
            _require(data, 6)
            return BatteryLevelEvent(data[5])
        if reference == HubPropertyReference.BATTERY_TYPE:
            _require(data, 6)
            return BatteryTypeEvent(data[5])
        try:
            return HubPropertyEvent(HubPropertyReference(reference))
        except ValueError:
            return HubPropertyEvent(reference)

    return None