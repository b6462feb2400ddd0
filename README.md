# legotrain

Drive Bluetooth Low Energy train hubs from Python: keep track of scanned
hubs whose name contains `Train`, connect to them one after another, set
motor power and LED colour, and read battery levels from their
notifications.

The package speaks the hub's wire protocol itself and leaves the radio to a
Bluetooth backend that you supply, so it can sit on top of whatever BLE
stack your platform offers.

## Installing

```
pip install legotrain
```

No third-party libraries are needed.

## Building and parsing messages

`legotrain.protocol` builds and parses the hub's messages:

```python
from legotrain.protocol import (
    build_frame, power_command, led_color_commands,
    battery_update_command, parse_notification,
)

frame = build_frame(power_command(50))          # length byte, hub id 0, then the payload
mode, colour = led_color_commands(255, 0, 0)     # RGB mode setup, then the colour itself
request = battery_update_command()               # enable battery level updates

event = parse_notification(notification_bytes)
```

`power_command` takes a signed byte (the motor expects -100..100) and
`led_color_commands` takes values in 0..255; anything else raises
`ValueError`. `parse_notification` returns an `AttachedIOEvent`,
`BatteryLevelEvent`, `BatteryTypeEvent` or `HubPropertyEvent`, or `None`
for message types it does not handle, and raises `ValueError` when the
notification is too short. The enumerations `MessageType`,
`HubPropertyReference` and `BatteryType` name the protocol's codes, and
`COMM_SERVICE_UUID` and `CONTROL_UUID` the GATT service and characteristic.

## Managing hubs

`legotrain.bledevice.BLEDevice` keeps the state of scanning, connecting,
service discovery and notification handling. Give it an object that
implements `legotrain.bledevice.BluetoothBackend` (scan, connect,
disconnect, open a service, enable notifications, write a
characteristic), then connect to its signals:

```python
from legotrain.bledevice import BLEDevice

hub = BLEDevice(backend)
hub.status_change.connect(print)
hub.battery_level.connect(lambda level, index: print(f"hub {index}: {level}%"))
hub.devices_ready.connect(lambda: hub.set_power(0, 40))

hub.start_scan()
# once the scan has finished:
hub.start_connect(0)
```

Your backend reports what happens on the radio by calling the matching
methods: `add_device`, `scan_finished`, `scan_error`, `device_connected`,
`device_disconnected`, `service_discovered`, `service_scan_done`,
`service_state_changed`, `controller_error` and `update_data`.
`update_data` returns the decoded event; battery levels are emitted on
`battery_level` for the first four hubs.

Commands: `set_power(index, power)`, `set_led_color(index, red, green,
blue)`, `set_battery_update(index)`, `start_acquisition(state)` (LED of
hub 0 red when on, green when off) and `disconnect_from_device()`.
`write_frame` pauses for `write_delay` seconds after each frame.

Other signals: `scanning_finished`, `connection_start`, `connection_end`,
`device_list_model_changed` and `new_data`.

## Devices and data upload

`legotrain.deviceinfo.DeviceInfo` holds a `DiscoveredDevice` and calls
subscribers when it is replaced with `set_device`.

`legotrain.dataprocessing.pack_channels` puts five little-endian 32-bit
lengths in front of five data channels, and
`legotrain.dataprocessing.DataProcessing` downloads a device's
`data1.dat` with `request()` or posts packed data with `create_data` and
`send_value`, using `urllib`.

## What it does not do

The package contains no Bluetooth stack: without a `BluetoothBackend`
implementation it cannot reach a hub. It has no graphical interface and
no command-line program.

## Running the tests

```
pip install legotrain[test]
pytest
```