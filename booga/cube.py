"""Cube flop: roll a cube across a board into the hole."""

from __future__ import annotations

import argparse
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

import numpy as np

from booga.quad import translation

logger = logging.getLogger(__name__)

CELL_SIZE = 1.0
BOARD_SIZE = 5
ROLL_SPEED = 3.0

_HALF = CELL_SIZE / 2

CLEAR_COLOR = (13, 13, 13)
BOARD_COLOR = (51, 51, 51)
CUBE_COLOR = (0, 255, 0)
CUBE_EDGE_COLOR = (0, 110, 0)

Vec3 = tuple[float, float, float]


@dataclass(frozen=True)
class GridPos:
    """A cell on the board."""

    x: int
    y: int


class Direction(Enum):
    """A roll of the cube, named by the key that starts it."""

    LEFT = "A"
    RIGHT = "D"
    UP = "W"
    DOWN = "S"

    @classmethod
    def from_key(cls, key: str) -> "Direction":
        """Return the direction bound to a key letter."""
        return cls(key.upper())

    @property
    def offset(self) -> tuple[int, int]:
        """Change in grid position."""
        return _MOVES[self][0]

    @property
    def axis(self) -> Vec3:
        """Axis the cube turns around."""
        return _MOVES[self][1]

    @property
    def pivot(self) -> Vec3:
        """Edge the cube turns about, relative to its center."""
        return _MOVES[self][2]


_MOVES = {
    Direction.LEFT: ((-1, 0), (0.0, 0.0, 1.0), (-_HALF, -_HALF, 0.0)),
    Direction.RIGHT: ((1, 0), (0.0, 0.0, -1.0), (_HALF, -_HALF, 0.0)),
    Direction.UP: ((0, -1), (-1.0, 0.0, 0.0), (0.0, -_HALF, -_HALF)),
    Direction.DOWN: ((0, 1), (1.0, 0.0, 0.0), (0.0, -_HALF, _HALF)),
}


def board_tile_center(x: int, y: int) -> Vec3:
    """Return the world position of the center of board cell (x, y)."""
    board_half = BOARD_SIZE * CELL_SIZE * 0.5
    return ((x + 0.5) * CELL_SIZE - board_half, 0.0, (y + 0.5) * CELL_SIZE - board_half)


def _rotation(axis: Sequence[float], angle: float) -> np.ndarray:
    x, y, z = np.asarray(axis, dtype=float) / np.linalg.norm(axis)
    c, s = math.cos(angle), math.sin(angle)
    t = 1.0 - c
    m = np.identity(4)
    m[:3, :3] = [
        [t * x * x + c, t * x * y - s * z, t * x * z + s * y],
        [t * x * y + s * z, t * y * y + c, t * y * z - s * x],
        [t * x * z - s * y, t * y * z + s * x, t * z * z + c],
    ]
    return m


@dataclass
class CubeGame:
    """The board, the cube on it and the roll in progress."""

    cube_pos: GridPos = field(default_factory=lambda: GridPos(2, 2))
    hole_pos: GridPos = field(default_factory=lambda: GridPos(4, 1))
    rotating: bool = False
    rotate_t: float = 0.0
    rotate_axis: Vec3 = (0.0, 0.0, 1.0)
    pivot_offset: Vec3 = (0.0, 0.0, 0.0)
    target_pos: Optional[GridPos] = None

    def start_move(self, direction: Direction) -> bool:
        """Begin rolling the cube; return False if a roll is already under way."""
        if self.rotating:
            return False
        dx, dy = direction.offset
        self.target_pos = GridPos(self.cube_pos.x + dx, self.cube_pos.y + dy)
        self.rotate_axis = direction.axis
        self.pivot_offset = direction.pivot
        self.rotating = True
        return True

    def update(self, dt: float) -> None:
        """Advance the roll by dt seconds, landing the cube when it completes."""
        if not self.rotating:
            return
        self.rotate_t += dt * ROLL_SPEED
        if self.rotate_t >= 1.0:
            self.cube_pos = self.target_pos
            self.rotating = False
            self.rotate_t = 0.0

    def cube_transform(self) -> np.ndarray:
        """Return the matrix placing a unit cube centered at the origin on the board."""
        x, _, z = board_tile_center(self.cube_pos.x, self.cube_pos.y)
        m = translation(x, CELL_SIZE * 0.5, z)
        if self.rotating:
            px, py, pz = self.pivot_offset
            m = (
                m
                @ translation(px, py, pz)
                @ _rotation(self.rotate_axis, self.rotate_t * math.pi * 0.5)
                @ translation(-px, -py, -pz)
            )
        return m

    def board_tiles(self) -> list[GridPos]:
        """Return every board cell except the hole, row by row."""
        return [
            GridPos(x, y)
            for y in range(BOARD_SIZE)
            for x in range(BOARD_SIZE)
            if GridPos(x, y) != self.hole_pos
        ]

    def has_won(self) -> bool:
        """Return whether the cube rests on the hole."""
        return not self.rotating and self.cube_pos == self.hole_pos


@dataclass
class OrbitCamera:
    """A camera circling the board's center."""

    yaw: float = 0.5
    pitch: float = 0.7
    distance: float = 8.0

    def drag(self, dx: float, dy: float) -> None:
        """Turn the camera by a mouse movement, keeping the pitch in range."""
        self.yaw += dx * 0.005
        self.pitch = min(max(self.pitch + dy * 0.005, 0.2), 1.2)

    def position(self) -> Vec3:
        """Return the camera's position in the world."""
        return (
            math.sin(self.yaw) * math.cos(self.pitch) * self.distance,
            math.sin(self.pitch) * self.distance,
            math.cos(self.yaw) * math.cos(self.pitch) * self.distance,
        )


_S = CELL_SIZE / 2
_CUBE_FACES = (
    ((-_S, -_S, _S), (_S, -_S, _S), (_S, _S, _S), (-_S, _S, _S)),
    ((-_S, -_S, -_S), (-_S, _S, -_S), (_S, _S, -_S), (_S, -_S, -_S)),
    ((-_S, -_S, -_S), (-_S, -_S, _S), (-_S, _S, _S), (-_S, _S, -_S)),
    ((_S, -_S, -_S), (_S, _S, -_S), (_S, _S, _S), (_S, -_S, _S)),
    ((-_S, _S, -_S), (-_S, _S, _S), (_S, _S, _S), (_S, _S, -_S)),
    ((-_S, -_S, -_S), (_S, -_S, -_S), (_S, -_S, _S), (-_S, -_S, _S)),
)


def _perspective(fovy: float, aspect: float, near: float, far: float) -> np.ndarray:
    f = 1.0 / math.tan(fovy / 2)
    m = np.zeros((4, 4))
    m[0, 0] = f / aspect
    m[1, 1] = f
    m[2, 2] = (far + near) / (near - far)
    m[2, 3] = 2 * far * near / (near - far)
    m[3, 2] = -1.0
    return m


def _look_at(eye: Vec3, target: Vec3, up: Vec3) -> np.ndarray:
    eye_v = np.asarray(eye, dtype=float)
    forward = np.asarray(target, dtype=float) - eye_v
    forward /= np.linalg.norm(forward)
    side = np.cross(forward, up)
    side /= np.linalg.norm(side)
    true_up = np.cross(side, forward)
    m = np.identity(4)
    m[0, :3], m[1, :3], m[2, :3] = side, true_up, -forward
    m[:3, 3] = -m[:3, :3] @ eye_v
    return m


def _scene_polygons(
    game: CubeGame, camera: OrbitCamera, width: int, height: int
) -> list[tuple[list[tuple[float, float]], tuple[int, int, int], bool]]:
    """Project the board and cube to screen polygons, farthest first."""
    proj = _perspective(math.pi / 4, width / height, 0.1, 100.0)
    view = _look_at(camera.position(), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0))

    shapes: list[tuple[list[Vec3], tuple[int, int, int], bool]] = []
    for tile in game.board_tiles():
        cx, cy, cz = board_tile_center(tile.x, tile.y)
        corners = [
            (cx - _HALF, cy, cz - _HALF),
            (cx + _HALF, cy, cz - _HALF),
            (cx + _HALF, cy, cz + _HALF),
            (cx - _HALF, cy, cz + _HALF),
        ]
        shapes.append((corners, BOARD_COLOR, False))
    xform = game.cube_transform()
    for face in _CUBE_FACES:
        shapes.append(([tuple((xform @ (*v, 1.0))[:3]) for v in face], CUBE_COLOR, True))

    projected = []
    for points, color, outlined in shapes:
        homo = np.array([[*p, 1.0] for p in points]).T
        eye = view @ homo
        clip = proj @ eye
        if np.any(clip[3] <= 1e-6):
            continue
        ndc = clip[:3] / clip[3]
        screen = [
            ((nx + 1.0) * 0.5 * width, (1.0 - ny) * 0.5 * height)
            for nx, ny in zip(ndc[0], ndc[1])
        ]
        projected.append((float(np.mean(eye[2])), screen, color, outlined))
    projected.sort(key=lambda item: item[0])
    return [(screen, color, outlined) for _, screen, color, outlined in projected]


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Open a window and play until it is closed."""
    parser = argparse.ArgumentParser(prog="cube-flop", description="Roll the cube into the hole.")
    parser.add_argument("--width", type=int, default=1280)
    parser.add_argument("--height", type=int, default=720)
    args = parser.parse_args(argv)

    import pygame

    pygame.init()
    try:
        screen = pygame.display.set_mode((args.width, args.height))
        pygame.display.set_caption("Cube Flop")
        pygame.mouse.set_visible(False)
        pygame.event.set_grab(True)
        pygame.mouse.get_rel()

        game = CubeGame()
        camera = OrbitCamera()
        clock = pygame.time.Clock()
        keys_to_directions = (
            (pygame.K_a, Direction.LEFT),
            (pygame.K_d, Direction.RIGHT),
            (pygame.K_w, Direction.UP),
            (pygame.K_s, Direction.DOWN),
        )
        announced = False
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False

            dx, dy = pygame.mouse.get_rel()
            if pygame.mouse.get_pressed()[0]:
                camera.drag(dx, dy)

            pressed = pygame.key.get_pressed()
            for key, direction in keys_to_directions:
                if pressed[key]:
                    game.start_move(direction)
                    break

            game.update(clock.tick(60) / 1000.0)

            won = game.has_won()
            if won and not announced:
                logger.info("You Win!")
                pygame.display.set_caption("Cube Flop - You Win!")
            announced = won

            screen.fill(CLEAR_COLOR)
            for points, color, outlined in _scene_polygons(
                game, camera, *screen.get_size()
            ):
                pygame.draw.polygon(screen, color, points)
                if outlined:
                    pygame.draw.polygon(screen, CUBE_EDGE_COLOR, points, 1)
            pygame.display.flip()
    finally:
        pygame.quit()
    return 0