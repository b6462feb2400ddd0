"""Control Bluetooth Low Energy train hubs: protocol, device manager and data upload."""

__version__ = "0.1.0"
__all__ = ["protocol", "deviceinfo", "dataprocessing", "bledevice"]