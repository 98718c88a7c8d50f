import json
import logging
import sys
from pathlib import Path

from pixelsleuth import Detector, DetectorConfig, ElaConfig


def main():
    print("--- Synthetic Image Analysis (Python) ---")

    base_dir = Path(__file__).parent.parent
    image_path = Path(sys.argv[1]) if len(sys.argv) > 1 else base_dir / "test-data" / "samples" / "gradient-photo.jpg"

    if not image_path.exists():
        print("Test image not found! Run scripts/generate-test-data.py first.")
        print(f"Image: {image_path}")
        sys.exit(1)

    logging.basicConfig(level=logging.INFO, format="%(name)s %(levelname)s: %(message)s")

    image_buffer = image_path.read_bytes()
    print(f"Analyzing image: {image_path.name}")
    print(f"Image size: {len(image_buffer)} bytes")

    # Slightly stricter re-encode than the default
    config = DetectorConfig(ela=ElaConfig(quality=0.85), max_workers=4)
    detector = Detector(config)
    result = detector.analyze(image_buffer, image_path.name)

    print("\n[Modules]")
    for name, module in result.modules.items():
        print(f"{name:<9} score={module.score:.2f}")
        for key, value in module.diagnostics.items():
            print(f"    {key} = {value:.4f}")

    print("\n[Verdict]")
    print(f"Verdict: {result.verdict.value}")
    print(f"Score: {result.overall_score:.3f}")
    print(f"Confidence: {result.confidence:.3f}")

    out_dir = base_dir / "test-data" / "visualizations"
    out_dir.mkdir(parents=True, exist_ok=True)
    for name, module in result.modules.items():
        if module.visualization is not None:
            (out_dir / f"{image_path.stem}.{name}.png").write_bytes(module.visualization.to_png())
    print(f"\nVisualizations written to {out_dir}")
    print(json.dumps(result.to_dict()["dimensions"]))


if __name__ == "__main__":
    main()
