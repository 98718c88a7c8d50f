"""Command-line interface for PixelSleuth."""
import argparse
import json
import logging
import mimetypes
import sys
from pathlib import Path

from .detector import Detector
from .errors import AnalysisError
from .types import Verdict


def analyze_command(args):
    """Analyze image command."""
    if getattr(args, "verbose", False):
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s: %(message)s")

    image_path = Path(args.file)
    if not image_path.exists():
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        sys.exit(2)

    content = image_path.read_bytes()
    mime_type = mimetypes.guess_type(image_path.name)[0] or "application/octet-stream"

    detector = Detector(max_workers=getattr(args, "workers", 1))
    try:
        result = detector.analyze(content, image_path.name, mime_type)
    except AnalysisError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    output_dir = getattr(args, "visualizations", None)
    if output_dir:
        out = Path(output_dir)
        out.mkdir(parents=True, exist_ok=True)
        for name, module in result.modules.items():
            if module.visualization is not None:
                (out / f"{image_path.stem}.{name}.png").write_bytes(module.visualization.to_png())

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(f"\n{'='*60}")
        print("  Synthetic Image Analysis Report")
        print(f"{'='*60}\n")
        print(f"File: {image_path.resolve()}")
        print(f"Dimensions: {result.width}x{result.height} ({mime_type})")
        print(f"Verdict: {result.verdict.value.upper()}")
        print(f"Score: {result.overall_score * 100:.0f}%")
        print(f"Confidence: {result.confidence * 100:.0f}%")

        print("\nModules:")
        for name, module in result.modules.items():
            print(f"  • {name:<9} {module.score * 100:5.0f}%")
            for note in module.notes:
                print(f"      {note}")

        if output_dir:
            print(f"\nVisualizations saved to: {Path(output_dir).resolve()}")

        print(f"\n{'='*60}\n")

    sys.exit(0 if result.verdict is Verdict.LIKELY_REAL else 1)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="pixelsleuth",
        description="CLI tool for detecting synthetically generated images"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    analyze_parser = subparsers.add_parser("analyze", help="Analyze an image")
    analyze_parser.add_argument("file", help="Image file to analyze")
    analyze_parser.add_argument("-j", "--json", action="store_true", help="Output as JSON")
    analyze_parser.add_argument("-w", "--workers", type=int, default=1, help="Number of parallel threads for analysis (default: 1)")
    analyze_parser.add_argument("-o", "--visualizations", help="Directory to write module visualizations as PNG")
    analyze_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    analyze_parser.set_defaults(func=analyze_command)

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
