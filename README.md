# omnibot

Control core for a three-wheeled omni-wheel robot. The package covers:

- **Kinematics** (`omnibot.kinematics`): `EmbodiedKinematics` turns a speed,
  heading, orientation and turn rate into three wheel speeds, and turns
  measured wheel speeds back into body velocities. `invert_3x3` inverts a
  3x3 matrix and raises `ValueError` if it is singular.
- **Commands** (`omnibot.commands`): JSON command messages for motion, the IMU
  and the LEDs. `parse_system_command` decodes one (text or UTF-8 bytes) into
  a frozen dataclass such as `Translate`, `Rotate`, `Omni` or `SetColor`;
  `command_to_dict` gives the wire form back. Bad input raises `CommandError`.
- **Devices** (`omnibot.pca9685`, `omnibot.icm42670`, `omnibot.i2c`): a
  `Pca9685` PWM motor driver and an `Icm42670` IMU on a shared I2C bus.
  `I2CDevices` brings both together, applies wheel speeds to the motor
  channels, reads the IMU and carries out device commands. Failures raise
  `DeviceError` (or `ImuNotInitialized` when the IMU is missing).
- **LEDs** (`omnibot.leds`): `LedModule` keeps track of on/off and the last
  colour (`RGB8`) and writes it to a two-LED chain through any driver with a
  `write(colors)` method.
- **Controller** (`omnibot.controller`): `CommandChannels` holds two bounded
  asyncio queues; `SystemController.i2c_ch` and `run_leds` consume them
  forever. `SystemController.handle` runs a single device command.
- **Server** (`omnibot.server`): `create_app` builds an aiohttp application
  with a WebSocket at `/ws?session=<id>` (subprotocol `messages`) that queues
  each incoming command; `run` serves it. `SessionManager` keeps an in-memory
  record of session ids and when they were last seen.

An I2C bus is any object with `write(address, data)` and
`write_read(address, data, read_len)` that raises `OSError` when a transfer
fails.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Command messages

Every message has a `ct` key that says where it goes: `i` for the motors and
the IMU, `l` for the LEDs.

| Message | Meaning |
|---|---|
| `{"ct": "i", "ic": "t", "d": 90, "s": 0.5}` | translate at heading `d` degrees, speed `s` |
| `{"ct": "i", "ic": "y", "s": 30, "o": 0}` | rotate in place (`o` optional) |
| `{"ct": "i", "ic": "o", "d": 45, "s": 0.5, "rs": 10, "o": 0}` | translate and rotate (`o` optional) |
| `{"ct": "i", "ic": "read_i_m_u"}` | read accelerometer, gyroscope and temperature |
| `{"ct": "i", "ic": "enable"}` / `{"ct": "i", "ic": "disable"}` | power the devices up or down |
| `{"ct": "l", "lc": "on"}` / `{"ct": "l", "lc": "off"}` | switch the LEDs |
| `{"ct": "l", "lc": "s_c", "r": 255, "g": 0, "b": 0}` | set the LED colour |

On connecting, the server sends `Connected`. It then answers each message with
`I2C command received and forwarded`, `LED command received and forwarded` or
`Invalid command format`; binary messages get the same answers as bytes.

```python
from omnibot.commands import parse_system_command, command_to_dict

cmd = parse_system_command('{"ct": "l", "lc": "s_c", "r": 255, "g": 0, "b": 0}')
assert command_to_dict(cmd)["lc"] == "s_c"
```

## Kinematics

```python
from omnibot.kinematics import EmbodiedKinematics

kin = EmbodiedKinematics(0.148, 0.195)
wheels = kin.compute_wheel_velocities(1.0, 90.0, 0.0, 0.0)
vx, vy, omega = kin.compute_body_velocity(wheels)
```

## Running without hardware

`omnibot-mock-mcu` starts the WebSocket server with an I2C bus on which no
device answers (`NullBus`) and an LED driver that logs each colour
(`LoggingLedDriver`). Device commands are accepted, queued and logged as not
executed, which makes it handy for working on a client:

```
omnibot-mock-mcu --help
omnibot-mock-mcu --port 8000
omnibot-mock-mcu --static-ip
```

It listens on all interfaces on port 8000 by default; `--static-ip` binds to
`192.168.69.2` instead, which must already be an address of the machine. The
log level comes from the `OMNIBOT_LOG` environment variable (default `ERROR`),
for example `OMNIBOT_LOG=INFO omnibot-mock-mcu`.

## What is not included

- The server answers only at `/ws`. It does not serve a web control page,
  stylesheet or script; a client must be provided separately.
- The package does not set up network interfaces or obtain an address; it
  binds to whatever address the host already has.
- There is no driver for real LED strips or a real I2C adapter: supply your
  own objects with the `write` / `write_read` methods described above.