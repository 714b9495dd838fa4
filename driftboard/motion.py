"""Client-side scene model: cursor easing, fading trails, peers and tone."""

from __future__ import annotations

import enum
import math
import random
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass, field, replace

from driftboard.packet import Packet, PacketError

SPEED_FACTOR = 0.01
STOP_RADIUS = 0.0
TRAIL_LIFE = 1_000.0
MAX_VOLUME = 2.0
RADIUS = 20.0
BASE_FREQUENCY = 200.0
BACKGROUND = "#121212"


class Waveform(enum.Enum):
    SINE = "sine"
    SAWTOOTH = "sawtooth"
    SQUARE = "square"


@dataclass(frozen=True)
class Circle:
    """A filled circle to draw."""

    x: float
    y: float
    radius: float
    color: str
    alpha: float = 1.0


@dataclass(frozen=True)
class TrailPoint:
    x: float
    y: float
    t: float


class Trail:
    """Recent positions that fade out over ``life`` milliseconds."""

    def __init__(self, life: float = TRAIL_LIFE) -> None:
        self.life = life
        self._points: deque[TrailPoint] = deque()

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[TrailPoint]:
        return iter(self._points)

    def push(self, x: float, y: float, t: float) -> None:
        """Record a point at time ``t`` and drop points that have expired."""
        self._points.append(TrailPoint(x, y, t))
        while self._points and t - self._points[0].t > self.life:
            self._points.popleft()

    def faded(self, now: float, color: str) -> list[Circle]:
        """Circles for the trail, oldest first, shrinking and fading with age."""
        circles = []
        for p in self._points:
            alpha = 1.0 - (now - p.t) / self.life
            circles.append(Circle(p.x, p.y, RADIUS * alpha, color, alpha))
        return circles


@dataclass
class _Peer:
    x: float
    y: float
    color: str


@dataclass
class Frame:
    """Everything one animation frame draws and plays."""

    circles: list[Circle]
    frequency: float
    gain: float
    background: str = BACKGROUND


def step_towards(x: float, y: float, tx: float, ty: float, dt: float) -> tuple[float, float, float]:
    """Move toward the target at a speed proportional to distance.

    Returns the new position and the speed used (zero when not moving).
    """
    dx = tx - x
    dy = ty - y
    dist = math.hypot(dx, dy)
    if dist > STOP_RADIUS and dt > 0.0:
        speed = dist * SPEED_FACTOR
        step = min(speed * dt, dist)
        return x + dx / dist * step, y + dy / dist * step, speed
    return x, y, 0.0


def sound_for_speed(speed: float) -> tuple[float, float]:
    """Oscillator frequency and gain for a cursor speed."""
    frequency = BASE_FREQUENCY + speed * 800.0
    gain = min(max(min(speed * 2.0, 0.1), 0.0), MAX_VOLUME)
    return frequency, gain


def pastel_color(rng: random.Random) -> str:
    """A random pastel HSL colour."""
    hue = math.floor(rng.random() * 360.0 + 0.5)
    return f"hsl({hue}, 70%, 70%)"


def choose_waveform(rng: random.Random) -> Waveform:
    """Pick one of the pleasant waveforms."""
    waves = list(Waveform)
    return waves[math.floor(rng.random() * len(waves))]


class Scene:
    """The local cursor, remote peers and their trails on a canvas."""

    def __init__(
        self,
        width: float,
        height: float,
        color: str | None = None,
        waveform: Waveform | None = None,
        rng: random.Random | None = None,
    ) -> None:
        rng = rng or random.Random()
        self.width = width
        self.height = height
        self.waveform = waveform or choose_waveform(rng)
        self.color = color or pastel_color(rng)
        self.position = (width * 0.5, height * 0.5)
        self.target = self.position
        self.my_id: str | None = None
        self.trail = Trail()
        self._peer_targets: dict[str, _Peer] = {}
        self._peer_positions: dict[str, _Peer] = {}
        self._peer_trails: dict[str, Trail] = {}
        self._last_time: float | None = None

    @property
    def peer_positions(self) -> dict[str, tuple[float, float]]:
        return {pid: (p.x, p.y) for pid, p in self._peer_positions.items()}

    @property
    def peer_targets(self) -> dict[str, tuple[float, float]]:
        return {pid: (p.x, p.y) for pid, p in self._peer_targets.items()}

    def handle_message(self, text: str) -> bool:
        """Apply a relayed packet; returns True when a peer target changed."""
        try:
            pkt = Packet.from_json(text)
        except PacketError:
            return False
        if self.my_id is None and pkt.color == self.color:
            self.my_id = pkt.id
        if pkt.id == self.my_id:
            return False
        self._peer_targets[pkt.id] = _Peer(pkt.x * self.width, pkt.y * self.height, pkt.color)
        return True

    def pointer_moved(self, x: float, y: float) -> str:
        """Set a new target and return the packet text to send."""
        self.target = (x, y)
        pkt = Packet(id="", color=self.color, x=x / self.width, y=y / self.height)
        return pkt.to_json()

    def frame(self, time: float) -> Frame:
        """Advance the animation to ``time`` (ms) and describe what to draw."""
        dt = 0.0 if self._last_time is None else time - self._last_time
        self._last_time = time
        circles: list[Circle] = []

        for pid, tgt in self._peer_targets.items():
            cur = self._peer_positions.setdefault(pid, replace(tgt))
            cur.x, cur.y, _ = step_towards(cur.x, cur.y, tgt.x, tgt.y, dt)
            circles.append(Circle(cur.x, cur.y, RADIUS, cur.color))
            trail = self._peer_trails.setdefault(pid, Trail())
            trail.push(cur.x, cur.y, time)
            circles.extend(trail.faded(time, cur.color))

        x, y, speed = step_towards(*self.position, *self.target, dt)
        self.position = (x, y)
        self.trail.push(x, y, time)
        circles.extend(self.trail.faded(time, self.color))
        circles.append(Circle(x, y, RADIUS, self.color))

        frequency, gain = sound_for_speed(speed)
        return Frame(circles=circles, frequency=frequency, gain=gain)


@dataclass
class _FixedRandom:
    values: list[float] = field(default_factory=list)

    def random(self) -> float:
        return self.values.pop(0)