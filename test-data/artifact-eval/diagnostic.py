"""Diagnostic: per-module metrics for real vs generated images."""
from pathlib import Path

from pixelsleuth import AnalysisError, Detector

detector = Detector(max_workers=4)
base = Path(__file__).resolve().parent

print("=" * 110)
print("DIAGNOSTIC: Real Photos vs Generated Images")
print("=" * 110)


def get_metrics(result):
    return {
        'score': result.overall_score,
        'conf': result.confidence,
        'ela_mean': result.ela.diagnostics['mean'],
        'low_freq': result.fft.diagnostics['low_freq_ratio'],
        'sat': result.color.diagnostics['avg_saturation'],
        'coherence': result.edge.diagnostics['coherence_ratio'],
        'noise': result.noise.diagnostics['avg_noise'],
        'lbp_ent': result.texture.diagnostics['texture_complexity'],
        'verdict': result.verdict.value,
    }


header = (f"  {'Image':27s} {'Score':>5s} {'conf':>5s} {'ela_m':>6s} {'low_f':>6s} "
          f"{'sat':>6s} {'coh':>6s} {'noise':>6s} {'lbp_e':>6s}  verdict")
print(header)
print("-" * 110)

for label, subdir in [("REAL", "real"), ("GENERATED", "ai-generated")]:
    d = base / subdir
    if not d.exists():
        continue
    print(f"\n  --- {label} ---")
    for fpath in sorted(d.iterdir()):
        if fpath.suffix.lower() not in ('.jpg', '.jpeg', '.png', '.webp'):
            continue
        try:
            m = get_metrics(detector.analyze(fpath.read_bytes(), fpath.name))
        except AnalysisError as e:
            print(f"  {fpath.name:27s} error: {e}")
            continue
        print(f"  {fpath.name:27s} {m['score']:5.2f} {m['conf']:5.2f} {m['ela_mean']:6.2f} "
              f"{m['low_freq']:6.3f} {m['sat']:6.1f} {m['coherence']:6.3f} "
              f"{m['noise']:6.2f} {m['lbp_ent']:6.3f}  {m['verdict']}")

print("\n" + "=" * 110)
