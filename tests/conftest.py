import pytest

from serial import SerialException


class FakeTransport(object):
    '''
    In-memory stand-in for serial.Serial. Responses are queued byte strings;
    each read() takes up to size bytes from the queue, so a short queue
    behaves like a read timeout.
    '''

    def __init__(self, responses=b'', is_open=False):
        self.is_open = is_open
        self.timeout = None
        self.write_timeout = None
        self.pending = bytearray(responses)
        self.written = []
        self.reads = []
        self.open_calls = 0
        self.close_calls = 0
        self.open_error = None
        self.write_error = None
        self.read_error = None
        self.close_error = None

    def queue(self, data):
        self.pending.extend(data)

    def open(self):
        self.open_calls += 1
        if self.open_error is not None:
            raise self.open_error
        self.is_open = True

    def close(self):
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error
        self.is_open = False

    def write(self, data):
        if self.write_error is not None:
            raise self.write_error
        self.written.append(bytes(data))
        return len(data)

    def read(self, size):
        self.reads.append(size)
        if self.read_error is not None:
            raise self.read_error
        data = bytes(self.pending[:size])
        del self.pending[:size]
        return data


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def iss(transport):
    from usbiss import USBISS

    transport.queue([0x01, 0x07])
    adapter = USBISS('port-A', transport=transport)
    adapter.open()
    transport.written.clear()
    transport.reads.clear()
    return adapter


@pytest.fixture
def serial_error():
    return SerialException('device disconnected')
