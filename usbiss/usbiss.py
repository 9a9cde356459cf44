import enum
import logging
from typing import Protocol, runtime_checkable

from serial import Serial, SerialException

log = logging.getLogger(__name__)

DEFAULT_BAUDRATE = 57600
DEFAULT_TIMEOUT = 0.032

# I2C modes understood by the set-mode command. S = software, H = hardware.
I2C_S_20KHZ = 0x20
I2C_S_50KHZ = 0x30
I2C_S_100KHZ = 0x40
I2C_S_400KHZ = 0x50
I2C_H_100KHZ = 0x60
I2C_H_400KHZ = 0x70
I2C_H_1000KHZ = 0x80

I2C_MODES = (
    I2C_S_20KHZ,
    I2C_S_50KHZ,
    I2C_S_100KHZ,
    I2C_S_400KHZ,
    I2C_H_100KHZ,
    I2C_H_400KHZ,
    I2C_H_1000KHZ,
)

ISS_CMD = 0x5A
ISS_SET_MODE = 0x02
I2C_AD1 = 0x55
I2C_TEST = 0x58

MAX_PAYLOAD = 255

MODE_ERRORS = {
    0x05: 'Unknown Command',
    0x06: 'Internal Error 1',
    0x07: 'Internal Error 2',
}


class ErrorKind(enum.Enum):
    TRANSPORT = 'transport'
    INITIALIZATION = 'initialization'
    NOT_READY = 'not ready'
    VALIDATION = 'validation'


class USBISSError(RuntimeError):
    kind = None


class TransportError(USBISSError):
    kind = ErrorKind.TRANSPORT


class InitializationError(USBISSError):
    kind = ErrorKind.INITIALIZATION

    def __init__(self, message, error_code=None):
        super().__init__(message)
        self.error_code = error_code


class NotReadyError(USBISSError):
    kind = ErrorKind.NOT_READY


class ValidationError(USBISSError, ValueError):
    kind = ErrorKind.VALIDATION


class State(enum.Enum):
    CLOSED = 'closed'
    READY = 'ready'


@runtime_checkable
class Transport(Protocol):
    '''
    The part of the pyserial Serial interface the adapter relies on. read
    returns fewer bytes than requested when the read timeout elapses.
    '''

    is_open: bool
    timeout: float
    write_timeout: float

    def open(self) -> None: ...

    def close(self) -> None: ...

    def write(self, data: bytes) -> int: ...

    def read(self, size: int) -> bytes: ...


def check_byte(name, value):
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 0xFF:
        raise ValidationError('USB-ISS: {} must be a byte, got {!r}'.format(name, value))
    return value


def check_address(address):
    if isinstance(address, bool) or not isinstance(address, int) or not 0 <= address <= 0x7F:
        raise ValidationError('USB-ISS: Invalid 7-bit I2C address {!r}'.format(address))
    return address


def address_byte(address, read):
    return (check_address(address) << 1) | (1 if read else 0)


class USBISS(object):
    '''
    USB-ISS adapter in I2C mode.

    Nothing is sent to the device until open() runs the set-mode handshake.
    All calls block until the expected bytes arrive or the timeout elapses.
    An instance is not safe to share between threads.

    transport may be any Transport, a serial.Serial that has not been opened
    for instance. Its timeout and write_timeout are overwritten with
    read_timeout and write_timeout. When it is omitted a Serial is created
    for device.

    Example:

        with USBISS('/dev/ttyACM0') as iss:
            data = iss.read(0x39, 0x92, 1)
    '''

    def __init__(self, device, read_timeout=DEFAULT_TIMEOUT, write_timeout=DEFAULT_TIMEOUT,
                 mode=I2C_H_100KHZ, transport=None):
        if mode not in I2C_MODES:
            raise ValidationError('USB-ISS: Unsupported I2C mode {!r}'.format(mode))

        self.device = device
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout
        self.mode = mode
        self.state = State.CLOSED
        self.firmware_status = None

        if transport is None:
            transport = Serial(None, DEFAULT_BAUDRATE,
                               timeout=read_timeout,
                               write_timeout=write_timeout)
            transport.port = device
        else:
            transport.timeout = read_timeout
            transport.write_timeout = write_timeout

        self.serial = transport

        if self.serial.is_open:
            self.release()

    @property
    def ready(self):
        return self.state is State.READY

    def open(self):
        if self.ready:
            return

        try:
            self.connect()
            self.send(bytes([ISS_CMD, ISS_SET_MODE, self.mode]))
            response = self.receive(2)
        except TransportError:
            self.release()
            raise

        if response[0] == 0:
            self.release()
            error_code = response[1]
            reason = MODE_ERRORS.get(error_code, 'Undocumented Error')
            log.warning('%s rejected I2C mode 0x%02X: %s (0x%02X)',
                        self.device, self.mode, reason, error_code)
            raise InitializationError('USB-ISS: Could not set I2C mode: {}'.format(reason),
                                      error_code=error_code)

        self.firmware_status = response[1]
        self.state = State.READY
        log.info('opened USB-ISS on %s in I2C mode 0x%02X', self.device, self.mode)

    def close(self):
        was_ready = self.ready
        self.release()

        if was_ready:
            log.info('closed USB-ISS on %s', self.device)

    def release(self):
        self.state = State.CLOSED
        self.firmware_status = None

        if not self.serial.is_open:
            return

        try:
            self.serial.close()
        except (SerialException, OSError):
            log.warning('error closing %s', self.device, exc_info=True)

    def write(self, address, register, payload=None):
        '''
        Writes payload into register of the device at address. Returns the
        status byte from the adapter unchanged: 0 means the adapter reported
        an error, anything else is success.
        '''
        self.check_ready()

        if isinstance(payload, int):
            raise ValidationError('USB-ISS: Payload must be a sequence of bytes.')

        try:
            payload = bytes() if payload is None else bytes(payload)
        except (TypeError, ValueError) as exc:
            raise ValidationError('USB-ISS: Payload must be a sequence of bytes.') from exc

        if len(payload) > MAX_PAYLOAD:
            raise ValidationError('USB-ISS: Cannot write more than {} bytes.'.format(MAX_PAYLOAD))

        frame = bytes([
            I2C_AD1,
            address_byte(address, read=False),
            check_byte('register', register),
            len(payload),
        ]) + payload

        self.send(frame)
        return self.receive(1)[0]

    def read(self, address, register, count):
        '''
        Reads count bytes starting at register of the device at address.
        Either all count bytes are returned or TransportError is raised.
        '''
        self.check_ready()

        frame = bytes([
            I2C_AD1,
            address_byte(address, read=True),
            check_byte('register', register),
            check_byte('count', count),
        ])

        self.send(frame)

        if count == 0:
            return bytes()

        return self.receive(count)

    def validate_address(self, address):
        self.check_ready()
        self.send(bytes([I2C_TEST, check_address(address)]))
        return self.receive(1)[0] != 0

    def connect(self):
        try:
            self.serial.open()
        except (SerialException, OSError, ValueError) as exc:
            raise TransportError('USB-ISS: Could not open {}'.format(self.device)) from exc

    def check_ready(self):
        if not self.ready:
            raise NotReadyError('USB-ISS: Device not found. Call open() first.')

    def send(self, frame):
        log.debug('%s <- %s', self.device, frame.hex())

        try:
            self.serial.write(frame)
        except (SerialException, OSError) as exc:
            raise TransportError('USB-ISS: Could not write to {}'.format(self.device)) from exc

    def receive(self, size):
        try:
            response = bytes(self.serial.read(size))
        except (SerialException, OSError) as exc:
            raise TransportError('USB-ISS: Could not read from {}'.format(self.device)) from exc

        log.debug('%s -> %s', self.device, response.hex())

        if len(response) != size:
            raise TransportError('USB-ISS: Timeout reading from {} (expected {} bytes, received {}).'.format(
                self.device, size, len(response)))

        return response

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
