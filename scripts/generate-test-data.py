#!/usr/bin/env python3
"""
Generate sample images for PixelSleuth testing.

Writes a handful of synthetic "camera-like" and "generator-like" images
to test-data/samples so the CLI and examples have something to chew on.
"""
import os

import numpy as np
from PIL import Image, ImageDraw, ImageFont
from PIL.PngImagePlugin import PngInfo

OUTPUT_DIR = 'test-data/samples'


def gradient_array(width, height):
    x = np.linspace(0, 255, width)
    y = np.linspace(0, 255, height)
    r = np.tile(x, (height, 1))
    g = np.tile(y[:, None], (1, width))
    b = 255 - r
    return np.dstack([r, g, b])


def create_camera_like_image(width, height, filename, seed=1):
    """Gradient with sensor-like noise, saved as JPEG with camera EXIF."""
    rng = np.random.default_rng(seed)
    pixels = gradient_array(width, height) + rng.normal(0, 4, (height, width, 3))
    img = Image.fromarray(np.clip(pixels, 0, 255).astype(np.uint8))

    draw = ImageDraw.Draw(img)
    try:
        font = ImageFont.truetype("arial.ttf", 40)
    except OSError:
        font = ImageFont.load_default()
    draw.text((40, 40), f"Sample {width}x{height}", font=font, fill='white')

    exif = Image.Exif()
    exif[0x010F] = "SampleCam"       # Make
    exif[0x0110] = "SC-100"          # Model
    exif[0x0131] = "SampleCam Firmware 1.0"  # Software
    img.save(filename, quality=92, exif=exif.tobytes())
    print(f"Created {filename}")


def create_generator_like_image(size, filename):
    """Smooth, noiseless square render with generation parameters in a text chunk."""
    img = Image.fromarray(gradient_array(size, size).round().astype(np.uint8))
    draw = ImageDraw.Draw(img)
    draw.ellipse([size // 4, size // 4, 3 * size // 4, 3 * size // 4], fill=(240, 200, 160))

    info = PngInfo()
    info.add_text("parameters", "a portrait of a cat\nSteps: 30, Sampler: Euler a, cfg: 7, seed: 12345")
    img.save(filename, pnginfo=info)
    print(f"Created {filename}")


def create_tiled_image(width, height, filename, tile=32, seed=2):
    """Random tile repeated across the frame (texture repetition)."""
    rng = np.random.default_rng(seed)
    patch = rng.integers(0, 256, (tile, tile, 3), dtype=np.uint8)
    reps = (height // tile + 1, width // tile + 1, 1)
    pixels = np.tile(patch, reps)[:height, :width]
    Image.fromarray(pixels).save(filename)
    print(f"Created {filename}")


def create_checkerboard_image(size, filename):
    """One-pixel checkerboard: all spectral energy at the Nyquist corners."""
    yy, xx = np.indices((size, size))
    plane = ((xx + yy) % 2 * 255).astype(np.uint8)
    Image.fromarray(plane).convert('RGB').save(filename)
    print(f"Created {filename}")


os.makedirs(OUTPUT_DIR, exist_ok=True)

print("Generating sample test images...")
print("=" * 50)

create_camera_like_image(1200, 800, f'{OUTPUT_DIR}/gradient-photo.jpg')
create_camera_like_image(800, 1200, f'{OUTPUT_DIR}/gradient-portrait.jpg', seed=3)
create_generator_like_image(512, f'{OUTPUT_DIR}/generated-512.png')
create_tiled_image(640, 480, f'{OUTPUT_DIR}/tiled-texture.png')
create_checkerboard_image(512, f'{OUTPUT_DIR}/checkerboard.png')

print("=" * 50)
print("All sample images created successfully!")
print("\nYou can now:")
print(f"  1. Analyze one: pixelsleuth analyze {OUTPUT_DIR}/gradient-photo.jpg")
print(f"  2. Compare: pixelsleuth analyze {OUTPUT_DIR}/generated-512.png --json")
print(f"  3. Dump visualizations: pixelsleuth analyze {OUTPUT_DIR}/tiled-texture.png -o vis/")
