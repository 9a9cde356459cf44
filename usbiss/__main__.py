import logging
import sys

from .usbiss import USBISS

ADDRESS = 0x39
REGISTER = 0x92


def main(argv=None):
    argv = sys.argv if argv is None else argv

    if len(argv) != 2:
        print('Usage: {} device-name'.format(argv[0]))
        return 1

    logging.basicConfig(level=logging.INFO)

    with USBISS(argv[1]) as iss:
        data = iss.read(ADDRESS, REGISTER, 1)

    print('0x{:02X} register 0x{:02X}: {}'.format(ADDRESS, REGISTER, data.hex()))
    return 0


if __name__ == '__main__':
    sys.exit(main())
