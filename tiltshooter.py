"""
Tilt Shooter: single-file pygame game.
File: tiltshooter.py

How to run:
  pip install pygame
  python tiltshooter.py

Tilt to move, tap to shoot. Tilt comes from the arrow keys / A-D (or the first
joystick axis) and is sampled every 16 ms like an accelerometer; a tap is a
mouse click or Space. Enemies drop from the top of the screen: shoot them for
points, and the run ends as soon as one touches the ship or slips past the
bottom edge.

GameEngine never touches the display or the mixer, so it can be driven
headless one tick at a time.
"""
from __future__ import annotations
import itertools
import math
import os
import random
import struct
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Tuple

import pygame

# ============================
# SETTINGS & CONSTANTS
# ============================
WIDTH, HEIGHT = 400, 800
FPS = 60
TITLE = "Space Shooter"
ASSET_DIR = os.path.join(os.path.dirname(__file__), "assets")
BACKGROUND_PATH = os.path.join(ASSET_DIR, "background.jpg")

# Feature flags
ENABLE_SOUND = True

# Colors
COLOR_BG = (8, 10, 24)
COLOR_UI = (255, 255, 255)
COLOR_PLAYER = (0, 255, 255)
COLOR_BULLET = (255, 255, 255)
COLOR_ENEMY = (255, 0, 0)
COLOR_DIM = (221, 221, 221)
COLOR_DARK = (34, 34, 34)
COLOR_DARK_DIM = (68, 68, 68)
COLOR_START_OVERLAY = (0, 0, 0, 153)
COLOR_END_OVERLAY = (255, 255, 255, 217)

# Gameplay constants. Speeds are pixels per tick, not per second.
PLAYER_SIZE = (50, 50)
BULLET_SIZE = (10, 20)
ENEMY_SIZE = (40, 40)
PLAYER_BOTTOM_MARGIN = 20
BULLET_LAUNCH_OFFSET = 40
BULLET_SPEED = 15.0
ENEMY_SPEED = 5.0
ENEMY_SPAWN_CHANCE = 0.02  # per tick, so the spawn rate scales with FPS
KILL_POINTS = 10
TILT_MOVE_MULT = 20.0

# Input
TILT_SAMPLE_MS = 16
TILT_MAX = 0.6
TILT_SMOOTHING = 0.25
JOYSTICK_DEADZONE = 0.15
TILT_SAMPLE_EVENT = pygame.USEREVENT + 1

# Scenes
SCENE_MENU = "MENU"
SCENE_PLAYING = "PLAYING"
SCENE_GAME_OVER = "GAME_OVER"

# Sound effect names
SFX_SHOOT = "shoot"
SFX_GAME_OVER = "gameover"


# ============================
# UTILS
# ============================
def clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else hi if x > hi else x


@dataclass(frozen=True)
class Config:
    """Fixed game constants. The defaults are the module settings above."""
    width: float = WIDTH
    height: float = HEIGHT
    player_width: float = PLAYER_SIZE[0]
    player_height: float = PLAYER_SIZE[1]
    bullet_width: float = BULLET_SIZE[0]
    bullet_height: float = BULLET_SIZE[1]
    enemy_width: float = ENEMY_SIZE[0]
    enemy_height: float = ENEMY_SIZE[1]
    player_bottom_margin: float = PLAYER_BOTTOM_MARGIN
    bullet_launch_offset: float = BULLET_LAUNCH_OFFSET
    bullet_speed: float = BULLET_SPEED
    enemy_speed: float = ENEMY_SPEED
    spawn_chance: float = ENEMY_SPAWN_CHANCE
    kill_points: int = KILL_POINTS
    move_mult: float = TILT_MOVE_MULT

    def __post_init__(self):
        sizes = (self.width, self.height, self.player_width, self.player_height,
                 self.bullet_width, self.bullet_height, self.enemy_width, self.enemy_height)
        if any(s <= 0 for s in sizes):
            raise ValueError("screen and entity sizes must be positive")
        if self.player_width > self.width or self.enemy_width > self.width:
            raise ValueError("entities must fit inside the screen width")
        if self.bullet_speed <= 0 or self.enemy_speed <= 0:
            raise ValueError("bullet and enemy speeds must be positive")
        if not 0.0 <= self.spawn_chance <= 1.0:
            raise ValueError(f"spawn_chance must be within [0, 1], got {self.spawn_chance}")
        if self.kill_points < 0:
            raise ValueError("kill_points must not be negative")

    @property
    def player_y(self) -> float:
        return self.height - self.player_height - self.player_bottom_margin

    @property
    def bullet_launch_y(self) -> float:
        return self.height - self.player_height - self.bullet_launch_offset

    @property
    def max_player_x(self) -> float:
        return self.width - self.player_width


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    w: float
    h: float


def collides(a: Box, b: Box) -> bool:
    """Axis-aligned overlap on half-open intervals; shared edges do not count."""
    return (
        a.x < b.x + b.w
        and a.x + a.w > b.x
        and a.y < b.y + b.h
        and a.y + a.h > b.y
    )


def load_background(path: str, size: Tuple[int, int]) -> Optional[pygame.Surface]:
    if not os.path.exists(path):
        return None
    try:
        img = pygame.image.load(path).convert()
        return pygame.transform.smoothscale(img, size)
    except Exception as e:
        print(f"[warn] could not load background {path}: {e}. Using solid color instead.")
        return None


# ============================
# SOUND
# ============================
class SoundManager:
    """Play the two game sound effects.

    Effects are loaded from ``assets/<name>.wav|ogg|mp3`` when present and
    generated procedurally otherwise, so no external files are required.
    Nothing in here ever raises into the caller.
    """
    EXTENSIONS = (".wav", ".ogg", ".mp3")

    def __init__(self, enabled: bool = True, asset_dir: str = ASSET_DIR):
        self.enabled = enabled
        self.asset_dir = asset_dir
        self.sounds = {}
        self._init_mixer()
        if self.enabled:
            shoot = self._load(SFX_SHOOT)
            if shoot is None:
                shoot = self._make_tone(880, 60, 0.25)
            fail = self._load(SFX_GAME_OVER)
            if fail is None:
                fail = self._make_sweep(440, 110, 500, 0.3)
            self.sounds[SFX_SHOOT] = shoot
            self.sounds[SFX_GAME_OVER] = fail

    def _init_mixer(self):
        if not self.enabled:
            return
        try:
            pygame.mixer.pre_init(frequency=22050, size=-16, channels=1, buffer=512)
            pygame.mixer.init()
        except Exception:
            self.enabled = False

    def _load(self, name: str):
        for ext in self.EXTENSIONS:
            path = os.path.join(self.asset_dir, name + ext)
            if not os.path.exists(path):
                continue
            try:
                return pygame.mixer.Sound(path)
            except Exception as e:
                print(f"[warn] could not load sound {path}: {e}")
        return None

    def _make_tone(self, freq: int, ms: int, volume: float):
        return self._make_sweep(freq, freq, ms, volume)

    def _make_sweep(self, freq_start: int, freq_end: int, ms: int, volume: float):
        if not self.enabled:
            return None
        sr = 22050
        n = max(1, int(sr * (ms / 1000.0)))
        amp = int(32767 * volume)
        buf = bytearray()
        phase = 0.0
        for i in range(n):
            freq = freq_start + (freq_end - freq_start) * (i / n)
            phase += 2 * math.pi * freq / sr
            s = int(amp * (1.0 - i / n) * math.sin(phase))
            buf += struct.pack('<h', s)
        try:
            return pygame.mixer.Sound(buffer=bytes(buf))
        except Exception:
            return None

    def play(self, name: str):
        """Fire and forget: unknown names, a disabled mixer and playback errors are ignored."""
        if not self.enabled:
            return
        snd = self.sounds.get(name)
        if snd is not None:
            try:
                snd.play()
            except Exception:
                pass


# ============================
# ENTITIES
# ============================
@dataclass(frozen=True)
class Bullet:
    id: str
    x: float
    y: float


@dataclass(frozen=True)
class Enemy:
    id: str
    x: float
    y: float


@dataclass
class Player:
    x: float
    y: float


@dataclass
class GameState:
    player: Player
    bullets: List[Bullet] = field(default_factory=list)
    enemies: List[Enemy] = field(default_factory=list)
    score: int = 0
    tilt: float = 0.0
    running: bool = True
    started: bool = False


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of one frame, handed to the renderer."""
    player_x: float
    player_y: float
    bullets: Tuple[Bullet, ...]
    enemies: Tuple[Enemy, ...]
    score: int
    started: bool
    running: bool
    frame: int


# ============================
# ENGINE
# ============================
class GameEngine:
    """One play session.

    ``tick()`` advances the simulation by a single frame. ``set_tilt()`` and
    ``fire()`` are the two inputs and may be called between ticks from any
    callback running on the same thread. A session ends for good on game
    over; build a new engine to play again.
    """

    def __init__(self, config: Optional[Config] = None, sound=None,
                 rng: Optional[random.Random] = None, auto_start: bool = False):
        self.config = config or Config()
        self.sound = sound
        self.rng = rng or random.Random()
        self._ids = itertools.count(1)
        c = self.config
        self.state = GameState(
            player=Player((c.width - c.player_width) / 2, c.player_y),
            started=auto_start,
        )
        self.frame = 0

    # ----------------------------
    # Session state
    # ----------------------------
    @property
    def started(self) -> bool:
        return self.state.started

    @property
    def running(self) -> bool:
        return self.state.running

    @property
    def score(self) -> int:
        return self.state.score

    @property
    def game_over(self) -> bool:
        return not self.state.running

    @property
    def wants_frames(self) -> bool:
        # Before start the loop idles; after game over it stops.
        return self.state.running

    def start(self):
        self.state.started = True

    # ----------------------------
    # Inputs
    # ----------------------------
    def set_tilt(self, value: float):
        value = float(value)
        # NaN or inf would leave the player off-screen for good; read it as level
        self.state.tilt = value if math.isfinite(value) else 0.0

    def fire(self) -> Optional[Bullet]:
        s = self.state
        if not s.started or not s.running:
            return None
        c = self.config
        bullet = Bullet(
            self._next_id("b"),
            s.player.x + c.player_width / 2 - c.bullet_width / 2,
            c.bullet_launch_y,
        )
        s.bullets.append(bullet)
        self._emit(SFX_SHOOT)
        return bullet

    # ----------------------------
    # Simulation
    # ----------------------------
    def tick(self) -> bool:
        """Advance one frame. Returns True when a full frame was committed."""
        s = self.state
        if not s.started or not s.running:
            return False
        c = self.config

        # 1) Tilt -> player. Positive tilt moves left.
        move = -s.tilt * c.move_mult
        s.player.x = clamp(s.player.x + move, 0.0, c.max_player_x)

        # 2) Bullets up, drop the ones gone above the screen
        s.bullets = [b for b in (replace(b, y=b.y - c.bullet_speed) for b in s.bullets)
                     if b.y > -c.bullet_height]

        # 3) Enemies down
        s.enemies = [replace(e, y=e.y + c.enemy_speed) for e in s.enemies]

        # 4) An enemy slipped past the bottom edge
        if any(e.y > c.height for e in s.enemies):
            self._game_over()
            return False

        # 5) Spawn
        if self.rng.random() < c.spawn_chance:
            s.enemies.append(Enemy(
                self._next_id("e"),
                self.rng.random() * (c.width - c.enemy_width),
                -c.enemy_height,
            ))

        # 6) Player hit. Checked before kills are resolved.
        player_box = self.player_box()
        if any(collides(self.enemy_box(e), player_box) for e in s.enemies):
            self._game_over()
            return False

        # 7) Bullets vs enemies: one kill per bullet, one bullet per kill
        active_bullets: List[Bullet] = []
        active_enemies = list(s.enemies)
        for b in s.bullets:
            bbox = self.bullet_box(b)
            hit = False
            for i, e in enumerate(active_enemies):
                if collides(bbox, self.enemy_box(e)):
                    s.score += c.kill_points
                    del active_enemies[i]
                    hit = True
                    break
            if not hit:
                active_bullets.append(b)

        # 8) Commit
        s.bullets = active_bullets
        s.enemies = active_enemies
        self.frame += 1
        return True

    def snapshot(self) -> Snapshot:
        s = self.state
        return Snapshot(
            player_x=s.player.x,
            player_y=s.player.y,
            bullets=tuple(s.bullets),
            enemies=tuple(s.enemies),
            score=s.score,
            started=s.started,
            running=s.running,
            frame=self.frame,
        )

    # ----------------------------
    # Bounding boxes
    # ----------------------------
    def player_box(self) -> Box:
        c = self.config
        return Box(self.state.player.x, c.player_y, c.player_width, c.player_height)

    def bullet_box(self, b: Bullet) -> Box:
        return Box(b.x, b.y, self.config.bullet_width, self.config.bullet_height)

    def enemy_box(self, e: Enemy) -> Box:
        return Box(e.x, e.y, self.config.enemy_width, self.config.enemy_height)

    # ----------------------------
    # Internals
    # ----------------------------
    def _next_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids)}"

    def _game_over(self):
        self.state.running = False
        self._emit(SFX_GAME_OVER)

    def _emit(self, name: str):
        if self.sound is None:
            return
        try:
            self.sound.play(name)
        except Exception:
            # Playback errors never reach the simulation
            pass

    def debug_line(self) -> str:
        s = self.state
        return (f"Frame {self.frame} | Score {s.score} | Player x {s.player.x:.1f} | "
                f"Tilt {s.tilt:+.2f} | Bullets {len(s.bullets)} | Enemies {len(s.enemies)} | "
                f"Started {s.started} | Running {s.running}")


# ============================
# INPUT
# ============================
class TiltSensor:
    """Turn held keys (or a joystick axis) into a smoothed tilt sample.

    Same sign convention as the engine: positive tilt moves the ship left.
    """

    def __init__(self, max_tilt: float = TILT_MAX, smoothing: float = TILT_SMOOTHING,
                 deadzone: float = JOYSTICK_DEADZONE):
        self.max_tilt = max_tilt
        self.smoothing = smoothing
        self.deadzone = deadzone
        self.value = 0.0

    def target(self, keys, axis: Optional[float] = None) -> float:
        if axis is not None and abs(axis) > self.deadzone:
            return -clamp(axis, -1.0, 1.0) * self.max_tilt
        lean = 0.0
        if keys[pygame.K_LEFT] or keys[pygame.K_a]:
            lean += 1.0
        if keys[pygame.K_RIGHT] or keys[pygame.K_d]:
            lean -= 1.0
        return lean * self.max_tilt

    def sample(self, keys, axis: Optional[float] = None) -> float:
        target = self.target(keys, axis)
        self.value += (target - self.value) * self.smoothing
        if abs(self.value - target) < 1e-3:
            self.value = target
        return self.value


# ============================
# FRAME DRIVER
# ============================
class FrameDriver:
    """Call a step function at a target frame rate until told to stop."""

    def __init__(self, fps: int = FPS, clock=None):
        self.fps = fps
        self.clock = clock if clock is not None else pygame.time.Clock()

    def run(self, step: Callable[[], object], stop: Callable[[], bool],
            max_frames: Optional[int] = None) -> int:
        frames = 0
        while not stop():
            if max_frames is not None and frames >= max_frames:
                break
            self.clock.tick(self.fps)
            step()
            frames += 1
        return frames

    def drive(self, engine: GameEngine, max_frames: Optional[int] = None) -> int:
        """Tick an engine until its session ends (or max_frames)."""
        return self.run(engine.tick, lambda: not engine.wants_frames, max_frames)


# ============================
# RENDERING
# ============================
class Renderer:
    def __init__(self, surface: pygame.Surface, config: Config,
                 font: Optional[pygame.font.Font] = None,
                 bigfont: Optional[pygame.font.Font] = None,
                 background: Optional[pygame.Surface] = None):
        self.surface = surface
        self.config = config
        self.font = font
        self.bigfont = bigfont
        self.background = background
        cx, cy = int(config.width // 2), int(config.height // 2)
        self.start_button = pygame.Rect(0, 0, 240, 64)
        self.start_button.center = (cx, cy + 70)
        self.retry_button = pygame.Rect(0, 0, 200, 54)
        self.retry_button.center = (cx, cy + 80)

    def draw(self, snap: Snapshot, scene: str):
        if self.background is not None:
            self.surface.blit(self.background, (0, 0))
        else:
            self.surface.fill(COLOR_BG)
        if snap.started:
            self.draw_game(snap)
        if scene == SCENE_MENU:
            self.draw_start_screen()
        elif scene == SCENE_GAME_OVER:
            self.draw_game_over(snap.score)

    def draw_game(self, snap: Snapshot):
        c = self.config
        for e in snap.enemies:
            pygame.draw.rect(self.surface, COLOR_ENEMY,
                             (int(e.x), int(e.y), int(c.enemy_width), int(c.enemy_height)))
        for b in snap.bullets:
            pygame.draw.rect(self.surface, COLOR_BULLET,
                             (int(b.x), int(b.y), int(c.bullet_width), int(c.bullet_height)),
                             border_radius=5)
        pygame.draw.rect(self.surface, COLOR_PLAYER,
                         (int(snap.player_x), int(snap.player_y),
                          int(c.player_width), int(c.player_height)))
        self._text(self.font, f"Score: {snap.score}", COLOR_UI, topleft=(20, 60))

    def draw_start_screen(self):
        self._overlay(COLOR_START_OVERLAY)
        cx, cy = int(self.config.width // 2), int(self.config.height // 2)
        self._text(self.bigfont, "SPACE SHOOTER", COLOR_UI, center=(cx, cy - 60))
        self._text(self.font, "Tilt to Move • Tap to Shoot", COLOR_DIM, center=(cx, cy - 10))
        pygame.draw.rect(self.surface, COLOR_PLAYER, self.start_button, border_radius=32)
        pygame.draw.rect(self.surface, COLOR_UI, self.start_button, 2, border_radius=32)
        self._text(self.font, "START GAME", (0, 0, 0), center=self.start_button.center)

    def draw_game_over(self, score: int):
        self._overlay(COLOR_END_OVERLAY)
        cx, cy = int(self.config.width // 2), int(self.config.height // 2)
        self._text(self.bigfont, "GAME OVER", COLOR_DARK, center=(cx, cy - 40))
        self._text(self.font, f"Final Score: {score}", COLOR_DARK_DIM, center=(cx, cy + 10))
        pygame.draw.rect(self.surface, (0, 0, 0), self.retry_button, border_radius=10)
        self._text(self.font, "TRY AGAIN", COLOR_UI, center=self.retry_button.center)

    def _overlay(self, rgba):
        overlay = pygame.Surface(self.surface.get_size(), pygame.SRCALPHA)
        overlay.fill(rgba)
        self.surface.blit(overlay, (0, 0))

    def _text(self, font, msg: str, color, **anchor):
        if font is None:
            return
        surf = font.render(msg, True, color)
        self.surface.blit(surf, surf.get_rect(**anchor))


# ============================
# GAME
# ============================
class Game:
    def __init__(self):
        pygame.init()
        pygame.display.set_caption(TITLE)
        self.config = Config()
        self.screen = pygame.display.set_mode((int(self.config.width), int(self.config.height)))
        self.font = pygame.font.SysFont(None, 30)
        self.bigfont = pygame.font.SysFont(None, 56)
        self.sound = SoundManager(ENABLE_SOUND)
        self.driver = FrameDriver(FPS)
        self.tilt = TiltSensor()
        self.joystick = self._find_joystick()
        self.renderer = Renderer(self.screen, self.config, self.font, self.bigfont,
                                 load_background(BACKGROUND_PATH, self.screen.get_size()))

        # State
        self.session = 0
        self.engine = GameEngine(self.config, sound=self.sound)
        self.scene = SCENE_MENU
        self.quit_requested = False

        pygame.time.set_timer(TILT_SAMPLE_EVENT, TILT_SAMPLE_MS)

    def _find_joystick(self):
        try:
            pygame.joystick.init()
            if pygame.joystick.get_count() > 0:
                js = pygame.joystick.Joystick(0)
                js.init()
                return js
        except pygame.error:
            pass
        return None

    def _joystick_axis(self) -> Optional[float]:
        if self.joystick is None or self.joystick.get_numaxes() == 0:
            return None
        return self.joystick.get_axis(0)

    # ============================
    # SESSION CONTROL
    # ============================
    def start_session(self):
        self.engine.start()
        self.scene = SCENE_PLAYING

    def restart(self):
        self.session += 1
        self.tilt.value = 0.0
        self.engine = GameEngine(self.config, sound=self.sound, auto_start=True)
        self.scene = SCENE_PLAYING

    # ============================
    # MAIN LOOP
    # ============================
    def run(self):
        self.driver.run(self.frame, lambda: self.quit_requested)
        pygame.quit()

    def frame(self):
        self.handle_events()
        self.engine.tick()
        if self.scene == SCENE_PLAYING and self.engine.game_over:
            self.scene = SCENE_GAME_OVER
        self.renderer.draw(self.engine.snapshot(), self.scene)
        pygame.display.flip()

    def handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.quit_requested = True
            elif event.type == TILT_SAMPLE_EVENT:
                self.engine.set_tilt(self.tilt.sample(pygame.key.get_pressed(), self._joystick_axis()))
            elif event.type == pygame.MOUSEBUTTONDOWN:
                self.tap(event.pos)
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE and self.scene != SCENE_PLAYING:
                    self.quit_requested = True
                elif event.key == pygame.K_RETURN:
                    if self.scene == SCENE_MENU:
                        self.start_session()
                    elif self.scene == SCENE_GAME_OVER:
                        self.restart()
                elif event.key == pygame.K_SPACE and self.scene == SCENE_PLAYING:
                    self.engine.fire()
                elif event.key == pygame.K_s and self.scene == SCENE_MENU:
                    # Toggle sound from menu
                    self.sound.enabled = not self.sound.enabled
                elif event.key == pygame.K_F1:
                    print(f"Session {self.session} | {self.engine.debug_line()}")

    def tap(self, pos: Tuple[int, int]):
        if self.scene == SCENE_MENU:
            if self.renderer.start_button.collidepoint(pos):
                self.start_session()
        elif self.scene == SCENE_PLAYING:
            self.engine.fire()
        elif self.scene == SCENE_GAME_OVER:
            if self.renderer.retry_button.collidepoint(pos):
                self.restart()


def main():
    Game().run()


if __name__ == "__main__":
    main()
