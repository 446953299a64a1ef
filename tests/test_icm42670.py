import pytest

from omnibot.icm42670 import Icm42670, ImuAddress, ImuError, PowerMode

IMU_ADDRESS = 0x68


def write(addr, data):
    return ("write", addr, bytes(data), None)


def write_read(addr, data, reply):
    return ("write_read", addr, bytes(data), bytes(reply))


class MockBus:
    def __init__(self, expectations):
        self.expectations = list(expectations)
        self.writes = []

    def write(self, address, data):
        assert self.expectations, f"unexpected write to {address:#x}: {data!r}"
        kind, addr, expected, _ = self.expectations.pop(0)
        assert (kind, addr, expected) == ("write", address, bytes(data))
        self.writes.append((address, bytes(data)))

    def write_read(self, address, data, read_len):
        assert self.expectations, f"unexpected write_read to {address:#x}"
        kind, addr, expected, reply = self.expectations.pop(0)
        assert (kind, addr, expected) == ("write_read", address, bytes(data))
        assert len(reply) == read_len
        return reply

    def extend(self, expectations):
        self.expectations.extend(expectations)

    def done(self):
        assert self.expectations == []


class FailingBus:
    def write(self, address, data):
        raise OSError("bus error")

    def write_read(self, address, data, read_len):
        raise OSError("bus error")


INIT = [
    write_read(IMU_ADDRESS, [0x75], [0x67]),
    write_read(IMU_ADDRESS, [0x21], [0x00]),
    write(IMU_ADDRESS, [0x21, 0x00]),
    write_read(IMU_ADDRESS, [0x20], [0x00]),
    write(IMU_ADDRESS, [0x20, 0x00]),
    write_read(IMU_ADDRESS, [0x1F], [0x0F]),
    write(IMU_ADDRESS, [0x1F, 0x0F]),
]


def make_imu(extra=()):
    bus = MockBus(INIT)
    imu = Icm42670(bus, ImuAddress.PRIMARY)
    bus.extend(extra)
    return bus, imu


def test_init_sequence():
    bus, imu = make_imu()
    bus.done()
    assert imu.address == IMU_ADDRESS


def test_wrong_chip_id_raises():
    bus = MockBus([write_read(IMU_ADDRESS, [0x75], [0x42])])
    with pytest.raises(ImuError):
        Icm42670(bus, ImuAddress.PRIMARY)
    bus.done()


def test_bus_failure_raises_imu_error():
    with pytest.raises(ImuError) as info:
        Icm42670(FailingBus(), ImuAddress.PRIMARY)
    assert isinstance(info.value.__cause__, OSError)


def test_accel_norm_scales_to_g():
    bus, imu = make_imu(
        [write_read(IMU_ADDRESS, [0x0B], [0x08, 0x00, 0xF8, 0x00, 0x00, 0x00])]
    )
    assert imu.accel_norm() == (1.0, -1.0, 0.0)
    bus.done()


def test_gyro_norm_scales_to_dps():
    bus, imu = make_imu(
        [write_read(IMU_ADDRESS, [0x11], [0x00, 0xA4, 0x00, 0x00, 0xFF, 0x5C])]
    )
    gx, gy, gz = imu.gyro_norm()
    assert gx == pytest.approx(10.0)
    assert gy == 0.0
    assert gz == pytest.approx(-10.0)
    bus.done()


@pytest.mark.parametrize(
    "raw, expected",
    [([0x00, 0x00], 25.0), ([0x00, 0x80], 26.0), ([0xFF, 0x80], 24.0)],
)
def test_temperature(raw, expected):
    bus, imu = make_imu([write_read(IMU_ADDRESS, [0x09], raw)])
    assert imu.temperature() == expected
    bus.done()


def test_sleep_mode_keeps_upper_bits():
    bus, imu = make_imu(
        [
            write_read(IMU_ADDRESS, [0x1F], [0xAF]),
            write(IMU_ADDRESS, [0x1F, 0xA0]),
        ]
    )
    imu.set_power_mode(PowerMode.SLEEP)
    bus.done()
    assert bus.writes[-1] == (IMU_ADDRESS, bytes([0x1F, 0xA0]))


def test_short_read_raises():
    class ShortBus(MockBus):
        def write_read(self, address, data, read_len):
            super().write_read(address, data, read_len)
            return b"\x00"

    bus = ShortBus(INIT)
    imu = Icm42670(bus, ImuAddress.PRIMARY)
    bus.extend([write_read(IMU_ADDRESS, [0x09], [0x00, 0x00])])
    with pytest.raises(ImuError):
        imu.temperature()