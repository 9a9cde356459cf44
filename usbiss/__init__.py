#!/usr/bin/env python3
'''
I2C register access through the USB-ISS interface. The adapter shows up as
a serial port and is driven with a small fixed command set; USBISS wraps
that command set behind open/close and register read/write calls.

Example:

Suppose that the USB-ISS is device /dev/ttyACM0. You can simply run:

python -m usbiss /dev/ttyACM0

USB-ISS Reference:
https://www.robot-electronics.co.uk/htm/usb_iss_tech.htm
'''
from .usbiss import (
    USBISS,
    ErrorKind,
    InitializationError,
    NotReadyError,
    State,
    Transport,
    TransportError,
    USBISSError,
    ValidationError,
    I2C_S_20KHZ,
    I2C_S_50KHZ,
    I2C_S_100KHZ,
    I2C_S_400KHZ,
    I2C_H_100KHZ,
    I2C_H_400KHZ,
    I2C_H_1000KHZ,
)
