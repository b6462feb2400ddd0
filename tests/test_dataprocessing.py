import io
import struct
import urllib.error
from email.message import Message

import pytest

from legotrain.dataprocessing import DataProcessing, pack_channels

SERVER = "http://host.example.com/dev"


class FakeResponse:
    def __init__(self, status, body):
        self.status = status
        self._body = body

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class Recorder:
    def __init__(self, response=None, error=None):
        self.requests = []
        self.response = response
        self.error = error

    def __call__(self, req):
        self.requests.append(req)
        if self.error is not None:
            raise self.error
        return self.response


def test_pack_channels_round_trip():
    channels = [b"a", b"bc", b"", b"defg", b"xyz"]
    packed = pack_channels(*channels)
    sizes = struct.unpack("<5I", packed[:20])
    assert list(sizes) == [len(ch) for ch in channels]
    assert packed[20:] == b"".join(channels)


def test_pack_channels_empty():
    assert pack_channels(b"", b"", b"", b"", b"") == bytes(20)


def test_data_url_pads_device_id():
    assert DataProcessing(SERVER, 7).data_url() == SERVER + "07/data1.dat"


def test_negative_device_id_rejected():
    with pytest.raises(ValueError):
        DataProcessing(SERVER, -1)


def test_request_get_reports_status_and_answer():
    statuses = []
    opener = Recorder(FakeResponse(200, b"hello"))
    proc = DataProcessing(SERVER, 3, opener=opener, on_status=statuses.append)
    assert proc.request() == "hello"
    assert proc.answer == "hello"
    assert statuses == ["200"]
    assert opener.requests[0].full_url == proc.data_url()
    assert opener.requests[0].get_method() == "GET"


def test_send_value_posts_with_headers():
    opener = Recorder(FakeResponse(201, b""))
    proc = DataProcessing(SERVER, 12, opener=opener)
    proc.send_value(b"payload")
    req = opener.requests[0]
    assert req.full_url == SERVER + "12/"
    assert req.get_method() == "POST"
    assert req.data == b"payload"
    assert req.get_header("Content-type") == "application/json"
    assert req.get_header("Content-length") == str(len(b"payload"))


def test_create_data_sends_packed_channels():
    opener = Recorder(FakeResponse(200, b"ok"))
    proc = DataProcessing(SERVER, opener=opener)
    channels = [b"1", b"22", b"333", b"", b"4"]
    assert proc.create_data(*channels) == "ok"
    assert opener.requests[0].data == pack_channels(*channels)


def test_http_error_reports_code():
    statuses = []
    error = urllib.error.HTTPError(
        SERVER, 404, "Not Found", Message(), io.BytesIO(b"missing")
    )
    proc = DataProcessing(SERVER, opener=Recorder(error=error), on_status=statuses.append)
    assert proc.request() == "missing"
    assert statuses == ["404"]


def test_connection_error_reports_empty_status():
    statuses = []
    error = urllib.error.URLError("unreachable")
    proc = DataProcessing(SERVER, opener=Recorder(error=error), on_status=statuses.append)
    assert proc.request() == ""
    assert statuses == [""]