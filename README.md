# booga

A small 3D puzzle game, plus the building blocks behind it.

- **Cube Flop** (`booga.cube`) is the game. You roll a cube across a 5×5 board until it comes to rest on the hole.
- **Drawing** (`booga.drawing`, `booga.quad`) collects quads for a frame: rectangles, circles, images and lines. Each quad is projected to normalized device coordinates, snapped to whole pixels, and culled when it lies fully off screen. Frames support z layers, scissor stacks and image slots.
- **Audio data** covers three modules:
  - `booga.audio_format`: sample formats, per-component conversion and saturating mixing of frames.
  - `booga.convert`: channel, bit-width and sample-rate conversion.
  - `booga.wav`: a streaming RIFF/WAVE reader for 16-, 24- and 32-bit integer PCM and 32-bit float data, including the extensible format.
- **Helpers**:
  - `booga.base`: `next_power_of_two`, `align_next`, `align_previous`, and a per-thread `ContextStack`.
  - `booga.color`: `hex_to_rgba`.

## Installing

```
pip install .
```

To install with the test dependencies:

```
pip install ".[test]"
```

## Playing

```
booga-cube
```

The command accepts `--width` and `--height` to set the window size. The default is 1280×720.

Controls:

- **W / A / S / D** roll the cube one tile.
- **Left mouse button + drag** orbits the camera.

When the cube comes to rest on the hole, the window title changes to "Cube Flop - You Win!".

## Using the library

### Game logic without a window

```python
from booga.cube import CubeGame, Direction, OrbitCamera

game = CubeGame()
game.start_move(Direction.RIGHT)
game.update(0.5)          # a roll completes after 1/3 s
print(game.cube_pos, game.has_won())   # GridPos(x=3, y=2) False

camera = OrbitCamera()
camera.drag(40, 10)       # pitch stays within 0.2 .. 1.2
print(camera.position())
```

### Reading and converting audio

Frames are numpy arrays of shape `(frames, channels)`. They hold `int16` samples for `AudioBits.BITS_16` and `float32` samples in [-1, 1] for `AudioBits.BITS_32`.

```python
from booga.audio_format import AudioBits, AudioFormat
from booga.convert import convert_frames
from booga.wav import WavStream, load_wav

fmt = AudioFormat(AudioBits.BITS_32, channels=2, sample_rate=48000)
frames = load_wav("clip.wav", fmt)      # whole file, converted to fmt

with WavStream.open("clip.wav", 48000) as wav:
    wav.set_frame_pos(48000, 1000)
    block = wav.read_frames(fmt, 1024)

mono = AudioFormat(AudioBits.BITS_16, channels=1, sample_rate=22050)
downmixed = convert_frames(frames, mono, fmt, 512)
```

If a file cannot be handled, `WavStream.open` and `load_wav` raise `WavError`. This covers a missing header or chunk, a bad `fmt` size and an unsupported sample format.

### Drawing quads into a frame

```python
from booga.drawing import COLOR_RED, DrawFrame

frame = DrawFrame(width=1280, height=720)
frame.push_z_layer(3)
quad = frame.draw_rect((0, 0), (100, 50), COLOR_RED)
frame.pop_z_layer()
print(len(frame.quads), quad.z)   # 1 3
frame.reset()
```

## What the package does not do

- There is no audio playback. The package reads WAV files and converts, resamples and mixes frames as arrays. It has no players, no fading or spatial effects, no output device and no OGG/Vorbis decoding.
- `DrawFrame` only collects and projects quads. It does not rasterize them, render text or load images or fonts.
- The Cube Flop window draws its board and cube itself as flat polygons with pygame. It does not use `DrawFrame`.

## Running the tests

```
pytest
```