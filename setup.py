from setuptools import setup

setup(
    name='pyusbiss',
    version='0.1',
    description='Python interface to I2C devices behind the USB-ISS adapter.',
    install_requires=[
        'pyserial'
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    packages=[
        'usbiss',
    ],
)
