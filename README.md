# driftboard

A small shared board where everyone connected is a coloured dot drifting
towards their pointer, leaving a fading trail behind it. The package holds
the relay server and the client-side model that drives the board.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Running the server

```
driftboard-server
```

The server listens on all interfaces at the port named by the `PORT`
environment variable, or 3000 when it is unset, not a whole number, or above
65535 (`port_from_env`). Clients connect to the `/ws` WebSocket endpoint.
Every JSON packet a client sends is stamped with that client's own id and
broadcast to everyone connected, the sender included. Text that is not a
valid packet is ignored. A client that sends a non-text message, or stays
silent for five minutes, is disconnected.

The application can also be built in code with `create_app(idle_timeout)`,
where `idle_timeout` is in seconds. The broadcast hub behind it is `Hub`,
with `subscribe`, `unsubscribe` and `publish`. Each subscriber gets its own
queue; one that falls a full channel (1024 messages) behind is dropped and
receives `None` to say so.

## Packets

`driftboard.packet.Packet` is the message on the wire: an `id`, a `color`,
and `x` and `y` as fractions of the sender's screen. Any other fields are
kept in `extra` and sent along unchanged.

```python
from driftboard.packet import Packet

pkt = Packet.from_json('{"id": "", "color": "hsl(120, 70%, 70%)", "x": 0.5, "y": 0.25}')
stamped = pkt.with_id("peer-1")
print(stamped.to_json())
```

Malformed input, missing or mistyped fields, and values that cannot be
written as JSON raise `PacketError`. `is_finite(packet)` tells whether both
coordinates are finite.

## Motion, trails and sound

`driftboard.motion` holds the model a client renders from:

- `step_towards(x, y, tx, ty, dt)` moves a point towards its target at a
  speed proportional to the remaining distance, and returns the new
  position and the speed used.
- `sound_for_speed(speed)` gives the oscillator frequency and gain for a
  speed.
- `Trail` keeps the points of the last second (times in milliseconds) and
  gives them back with `faded(now, color)` as `Circle`s that shrink and fade
  with age.
- `pastel_color(rng)` and `choose_waveform(rng)` pick a player's colour and
  `Waveform`.
- `Scene` ties it together: feed it server messages with `handle_message`,
  pointer positions with `pointer_moved` (which returns the packet text to
  send), and call `frame(time)` on each animation tick to get the `Frame`
  holding the `Circle`s to draw, the background colour, and the frequency
  and gain to play.

## What this package does not do

There is no client program here. `Scene` only describes each frame; it does
not open a window, draw on a canvas, play sound or connect to the server.
Showing the circles, driving an oscillator from the frequency and gain, and
carrying the packet text to and from the `/ws` endpoint are left to the
program that uses it.