import pytest

from legotrain.protocol import (
    AttachedIOEvent,
    BatteryLevelEvent,
    BatteryType,
    BatteryTypeEvent,
    HubPropertyEvent,
    HubPropertyReference,
    MessageType,
    battery_update_command,
    build_frame,
    led_color_commands,
    parse_notification,
    power_command,
)


@pytest.mark.parametrize("payload", [b"", b"\x01", bytes(range(10))])
def test_build_frame_header_invariants(payload):
    frame = build_frame(payload)
    assert frame[0] == len(frame)
    assert frame[1] == 0
    assert frame[2:] == payload


def test_build_frame_length_wraps_to_byte():
    frame = build_frame(bytes(300))
    assert frame[0] == (len(frame)) % 256
    assert len(frame) == 302


def test_battery_update_command_bytes():
    assert battery_update_command() == bytes([0x01, 0x06, 0x02])


def test_battery_update_frame():
    assert build_frame(battery_update_command()) == b"\x05\x00\x01\x06\x02"


def test_power_command_positive():
    assert power_command(50) == bytes([0x81, 0x00, 0x11, 0x51, 0x00, 50])


@pytest.mark.parametrize("power", [-100, -1, 0, 1, 100, 127, -128])
def test_power_command_signed_round_trip(power):
    command = power_command(power)
    assert int.from_bytes(command[-1:], "little", signed=True) == power
    assert command[0] == MessageType.PORT_OUTPUT_COMMAND


@pytest.mark.parametrize("power", [128, -129, 1000])
def test_power_command_out_of_range(power):
    with pytest.raises(ValueError):
        power_command(power)


def test_led_color_commands():
    mode, colour = led_color_commands(255, 0, 10)
    assert mode == bytes([0x41, 50, 0x01, 0x01, 0x00, 0x00, 0x00, 0x00])
    assert colour == bytes([0x81, 50, 0x11, 0x51, 0x01, 255, 0, 10])


@pytest.mark.parametrize("rgb", [(256, 0, 0), (0, -1, 0), (0, 0, 999)])
def test_led_color_rejects_bad_values(rgb):
    with pytest.raises(ValueError):
        led_color_commands(*rgb)


@pytest.mark.parametrize("state", [1, 2])
def test_attached_io_connected(state):
    data = bytes([6, 0, MessageType.HUB_ATTACHED_IO, 3, state, 0x29])
    assert parse_notification(data) == AttachedIOEvent(3, True, 0x29)


def test_attached_io_disconnected():
    data = bytes([5, 0, MessageType.HUB_ATTACHED_IO, 1, 0])
    assert parse_notification(data) == AttachedIOEvent(1, False, None)


def test_battery_level():
    data = bytes(
        [6, 0, MessageType.HUB_PROPERTIES, HubPropertyReference.BATTERY_VOLTAGE, 6, 87]
    )
    assert parse_notification(data) == BatteryLevelEvent(87)


def test_battery_type():
    data = bytes(
        [
            6,
            0,
            MessageType.HUB_PROPERTIES,
            HubPropertyReference.BATTERY_TYPE,
            6,
            BatteryType.RECHARGEABLE,
        ]
    )
    assert parse_notification(data) == BatteryTypeEvent(BatteryType.RECHARGEABLE)


def test_other_hub_property():
    data = bytes([5, 0, MessageType.HUB_PROPERTIES, HubPropertyReference.RSSI, 6])
    event = parse_notification(data)
    assert event == HubPropertyEvent(HubPropertyReference.RSSI)
    assert event.reference is HubPropertyReference.RSSI


def test_unknown_hub_property_kept_as_int():
    data = bytes([5, 0, MessageType.HUB_PROPERTIES, 0x7F, 6])
    assert parse_notification(data) == HubPropertyEvent(0x7F)


def test_unhandled_message_type():
    data = bytes([5, 0, MessageType.PORT_VALUE_SINGLE, 0, 0])
    assert parse_notification(data) is None


@pytest.mark.parametrize(
    "data",
    [
        b"\x02\x00",
        bytes([4, 0, MessageType.HUB_ATTACHED_IO, 1]),
        bytes([5, 0, MessageType.HUB_ATTACHED_IO, 1, 1]),
        bytes([5, 0, MessageType.HUB_PROPERTIES, HubPropertyReference.BATTERY_VOLTAGE, 6]),
    ],
)
def test_short_notification_raises(data):
    with pytest.raises(ValueError):
        parse_notification(data)