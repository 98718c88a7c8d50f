"""Evaluate the detector against folders of real and AI-generated images.

Drop real photos in ./real and generated images in ./ai-generated.
"""
from pathlib import Path

from pixelsleuth import AnalysisError, Detector, Verdict

IMAGE_SUFFIXES = ('.jpg', '.jpeg', '.png', '.webp')

detector = Detector(max_workers=4)
base = Path(__file__).resolve().parent

print("=" * 78)
print("ARTIFACT DATASET EVALUATION - PixelSleuth")
print("=" * 78)


def print_result(fpath, result, expect_real):
    if expect_real:
        status = "PASS" if result.verdict is Verdict.LIKELY_REAL else "FAIL"
    else:
        status = "PASS" if result.verdict is not Verdict.LIKELY_REAL else "FAIL"
    print(f"  [{status}] {fpath.name:30s}  score={result.overall_score:.2f}  "
          f"conf={result.confidence:.2f}  verdict={result.verdict.value}")
    sub_scores = [f"{name}={module.score:.2f}" for name, module in result.modules.items()]
    print(f"         [{', '.join(sub_scores)}]")


def evaluate(directory, expect_real):
    results = []
    if not directory.exists():
        print(f"  (missing directory {directory})")
        return results
    for fpath in sorted(directory.iterdir()):
        if fpath.suffix.lower() not in IMAGE_SUFFIXES:
            continue
        try:
            result = detector.analyze(fpath.read_bytes(), fpath.name)
        except AnalysisError as e:
            print(f"  [SKIP] {fpath.name:30s}  {e}")
            continue
        results.append((fpath.name, result))
        print_result(fpath, result, expect_real)
    return results


# --- Real Images ---
print("\n" + "-" * 78)
print("REAL PHOTOS  [Expected: Likely Real]")
print("-" * 78)
real_results = evaluate(base / "real", expect_real=True)

# --- AI-Generated Images ---
print("\n" + "-" * 78)
print("AI-GENERATED IMAGES  [Expected: Suspicious or Likely AI]")
print("-" * 78)
ai_results = evaluate(base / "ai-generated", expect_real=False)

# --- Summary ---
print("\n" + "=" * 78)
print("SUMMARY")
print("=" * 78)

real_correct = sum(1 for _, r in real_results if r.verdict is Verdict.LIKELY_REAL)
real_total = len(real_results)
ai_correct = sum(1 for _, r in ai_results if r.verdict is not Verdict.LIKELY_REAL)
ai_total = len(ai_results)
total_correct = real_correct + ai_correct
total = real_total + ai_total

print(f"  Real photos correctly identified:    {real_correct}/{real_total}")
print(f"  AI images correctly identified:      {ai_correct}/{ai_total}")
print(f"  Overall accuracy:                    {total_correct}/{total} ({100*total_correct/max(total,1):.1f}%)")

if real_results:
    real_scores = [r.overall_score for _, r in real_results]
    print(f"\n  Real scores:  min={min(real_scores):.2f}  max={max(real_scores):.2f}  "
          f"avg={sum(real_scores)/len(real_scores):.2f}")
if ai_results:
    ai_scores = [r.overall_score for _, r in ai_results]
    print(f"  AI scores:    min={min(ai_scores):.2f}  max={max(ai_scores):.2f}  "
          f"avg={sum(ai_scores)/len(ai_scores):.2f}")

if real_results and ai_results:
    gap = min(ai_scores) - max(real_scores)
    print(f"\n  Score gap (ai_min - real_max): {gap:.2f}")
    if gap > 0:
        print("  -> Clean separation!")
    else:
        print("  -> OVERLAP exists")

print("\n" + "=" * 78)
