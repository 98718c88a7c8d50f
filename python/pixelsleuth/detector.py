"""Main PixelSleuth implementation.

Decodes an image, runs the seven independent analysis modules over the
same immutable pixel buffer, and aggregates their scores into a verdict.
"""
import concurrent.futures
import logging
from typing import Callable, Dict, List, Optional, Tuple

from .aggregate import Aggregator
from .color import analyze_color
from .config import DetectorConfig
from .edges import analyze_edges
from .ela import analyze_ela
from .errors import AnalysisError, RenderingFailure
from .frequency import analyze_frequency
from .imaging import Encoder, decode_image, jpeg_reencode
from .metadata import analyze_metadata
from .noise import analyze_noise
from .texture import analyze_texture
from .types import AnalysisResult, ModuleResult, PixelBuffer

logger = logging.getLogger(__name__)


class Detector:
    """Synthetic image detector built from hand-tuned forensic heuristics."""

    def __init__(
        self,
        config: Optional[DetectorConfig] = None,
        max_workers: Optional[int] = None,
        encoder: Optional[Encoder] = None,
    ):
        """Initialize Detector.

        Args:
            config: Module thresholds and aggregator weights.
            max_workers: Number of threads for the analysis modules.
                1 runs them sequentially. Defaults to ``config.max_workers``.
            encoder: Lossy re-encoder used by ELA, defaults to JPEG via Pillow.
        """
        self.config = config or DetectorConfig()
        workers = max_workers if max_workers is not None else self.config.max_workers
        self._max_workers = max(1, workers)
        self._encoder = encoder or jpeg_reencode
        self._aggregator = Aggregator(self.config.aggregator)

    def analyze(self, file_bytes: bytes, file_name: str = "", mime_type: str = "") -> AnalysisResult:
        """Analyze an encoded image file.

        Raises:
            DecodeFailure: the bytes are not a readable image.
            RenderingFailure: a module failed; no partial result is produced.
        """
        buffer = decode_image(file_bytes)
        return self.analyze_buffer(buffer, file_bytes, file_name, mime_type)

    def analyze_buffer(
        self,
        buffer: PixelBuffer,
        file_bytes: bytes = b"",
        file_name: str = "",
        mime_type: str = "",
    ) -> AnalysisResult:
        """Analyze already-decoded pixels; ``file_bytes`` feeds only the metadata module."""
        results = self._run_modules(self._tasks(buffer, file_bytes))

        aggregate = self._aggregator.combine({name: r.score for name, r in results.items()})
        logger.info(
            "%s: %s (score %.3f, confidence %.3f)",
            file_name or "<buffer>", aggregate.verdict.value,
            aggregate.overall_score, aggregate.confidence,
        )

        return AnalysisResult(
            file_name=file_name,
            file_size=len(file_bytes),
            mime_type=mime_type,
            width=buffer.width,
            height=buffer.height,
            overall_score=aggregate.overall_score,
            confidence=aggregate.confidence,
            verdict=aggregate.verdict,
            **results,
        )

    def _tasks(self, buffer: PixelBuffer, file_bytes: bytes) -> List[Tuple[str, Callable[[], ModuleResult]]]:
        cfg = self.config
        return [
            ("metadata", lambda: analyze_metadata(file_bytes, buffer.width, buffer.height, cfg.metadata)),
            ("ela", lambda: analyze_ela(buffer, cfg.ela, encoder=self._encoder)),
            ("fft", lambda: analyze_frequency(buffer, cfg.fft)),
            ("color", lambda: analyze_color(buffer, cfg.color)),
            ("edge", lambda: analyze_edges(buffer, cfg.edge)),
            ("noise", lambda: analyze_noise(buffer, cfg.noise)),
            ("texture", lambda: analyze_texture(buffer, cfg.texture)),
        ]

    def _run_modules(self, tasks: List[Tuple[str, Callable[[], ModuleResult]]]) -> Dict[str, ModuleResult]:
        """Run every module, sequentially or on a thread pool.

        The first failure abandons the batch and is re-raised as
        :class:`RenderingFailure`.
        """
        results: Dict[str, ModuleResult] = {}
        if self._max_workers == 1:
            for key, fn in tasks:
                results[key] = _run_one(key, fn)
            return results

        with concurrent.futures.ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            futures = [executor.submit(_run_one, key, fn) for key, fn in tasks]
            done, pending = concurrent.futures.wait(
                futures, return_when=concurrent.futures.FIRST_EXCEPTION
            )
            for future in pending:
                future.cancel()
            # Collect in task order so the raised error is deterministic
            for (key, _), future in zip(tasks, futures):
                if future in done:
                    results[key] = future.result()

        return {key: results[key] for key, _ in tasks}


def _run_one(name: str, fn: Callable[[], ModuleResult]) -> ModuleResult:
    try:
        return fn()
    except AnalysisError:
        raise
    except Exception as e:
        logger.exception("%s analysis failed", name)
        raise RenderingFailure(name, str(e)) from e
