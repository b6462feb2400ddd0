"""Packing of recorded channel data and its upload to an HTTP server."""

from __future__ import annotations

import logging
import struct
import urllib.error
import urllib.request
from collections.abc import Callable
from typing import Any

log = logging.getLogger(__name__)

DEFAULT_SERVER = "https://iot.example.com/iot/dev"
CONTROL_SIZE = 16


def pack_channels(ch1: bytes, ch2: bytes, ch3: bytes, ch4: bytes, ch5: bytes) -> bytes:
    """Five little-endian uint32 lengths followed by the five channels."""
    channels = (ch1, ch2, ch3, ch4, ch5)
    header = struct.pack("<5I", *(len(ch) for ch in channels))
    return header + b"".join(bytes(ch) for ch in channels)


class DataProcessing:
    """Fetches and posts data files for one device on the server."""

    def __init__(
        self,
        server: str = DEFAULT_SERVER,
        device_id: int = 0,
        opener: Callable[[urllib.request.Request], Any] | None = None,
        on_status: Callable[[str], None] | None = None,
    ) -> None:
        if device_id < 0:
            raise ValueError("device_id must not be negative")
        self.server = server
        self.device_id = device_id
        self.control = bytearray(CONTROL_SIZE)
        self.answer = ""
        self._opener = opener or urllib.request.urlopen
        self._on_status = on_status

    def _device_base(self) -> str:
        return f"{self.server}{self.device_id:02d}"

    def data_url(self) -> str:
        return f"{self._device_base()}/data1.dat"

    def _perform(self, req: urllib.request.Request) -> str:
        try:
            with self._opener(req) as response:
                status: int | None = response.status
                body = response.read()
        except urllib.error.HTTPError as exc:
            log.debug("HTTP error: %s", exc)
            status = exc.code
            body = exc.read() or b""
        except urllib.error.URLError as exc:
            log.debug("request failed: %s", exc.reason)
            status = None
            body = b""
        if self._on_status is not None:
            self._on_status("" if status is None else str(status))
        self.answer = body.decode("utf-8", errors="replace")
        return self.answer

    def request(self) -> str:
        """Download the device's data file; return the response body."""
        return self._perform(urllib.request.Request(self.data_url(), method="GET"))

    def create_data(
        self, ch1: bytes, ch2: bytes, ch3: bytes, ch4: bytes, ch5: bytes
    ) -> str:
        """Pack the five channels and upload them."""
        log.debug(
            "create data %s", [len(ch) for ch in (ch1, ch2, ch3, ch4, ch5)]
        )
        return self.send_value(pack_channels(ch1, ch2, ch3, ch4, ch5))

    def send_value(self, data: bytes) -> str:
        """Post raw data to the device directory; return the response body."""
        payload = bytes(data)
        req = urllib.request.Request(
            f"{self._device_base()}/",
            data=payload,
            method="POST",
            headers={
                "Content-Type": "application/json",
                "Content-Length": str(len(payload)),
            },
        )
        return self._perform(req)