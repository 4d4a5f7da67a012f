"""
Batch decoding of many animation files.

Files share nothing, so they decode in parallel on a thread or process
pool. A failing file never stops the batch: its error is recorded as a
DecodeFailure and reported with the file name, error kind and byte offset.
"""

import concurrent.futures
import logging
from pathlib import Path
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple, Union

from tqdm import tqdm

from ..core.errors import AnimFormatError
from ..utils.config import DecoderConfig
from .decoder import AnimationDecoder
from .pose import PoseSequence

logger = logging.getLogger(__name__)

BatchItem = Union[str, Path, Tuple[str, Union[bytes, Path]]]

EXECUTORS = {
    'thread': concurrent.futures.ThreadPoolExecutor,
    'process': concurrent.futures.ProcessPoolExecutor,
}


class DecodeFailure(NamedTuple):
    """One file that could not be decoded."""
    name: str
    kind: str
    offset: Optional[int]
    message: str

    @classmethod
    def from_error(cls, name: str, error: Exception) -> 'DecodeFailure':
        if isinstance(error, AnimFormatError):
            return cls(name, error.kind.value, error.offset, error.message)
        return cls(name, type(error).__name__, None, str(error))

    def __str__(self) -> str:
        where = f"0x{self.offset:X}" if self.offset is not None else "-"
        return f"{self.name}: {self.kind} at {where}: {self.message}"


class BatchReport(NamedTuple):
    """
    Outcome of a batch: decoded sequences by name plus failures.

    Paths are named by their full path string, so files sharing a basename
    in different directories stay separate.
    """
    results: Dict[str, PoseSequence]
    failures: List[DecodeFailure]

    @property
    def succeeded(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    def format_report(self) -> str:
        """One line per failure, then a summary line."""
        lines = [str(failure) for failure in self.failures]
        lines.append(f"{self.succeeded}/{self.total} decoded, {self.failed} failed")
        return "\n".join(lines)


def _normalize_item(item: BatchItem) -> Tuple[str, Union[bytes, Path]]:
    if isinstance(item, tuple):
        name, payload = item
        return name, payload
    path = Path(item)
    return str(path), path


def _decode_item(
    name: str,
    payload: Union[bytes, Path],
    config: DecoderConfig
) -> PoseSequence:
    """Worker entry point (module level so process pools can pickle it)."""
    if isinstance(payload, Path):
        payload = payload.read_bytes()
    return AnimationDecoder(config).decode(payload, name=name)


def decode_batch(
    items: Iterable[BatchItem],
    config: Optional[DecoderConfig] = None
) -> BatchReport:
    """
    Decode many files in parallel.

    Args:
        items: File paths or (name, bytes or path) pairs. Names must be
            unique; paths are named by their full path string
        config: Decoder configuration; ``batch_executor``, ``batch_workers``
            and ``show_progress`` control the pool

    Returns:
        BatchReport in input order

    Raises:
        ValueError: Unknown executor or two items with the same name
    """
    config = config or DecoderConfig()
    if config.batch_executor not in EXECUTORS:
        raise ValueError(
            f"Unknown batch executor: {config.batch_executor}. "
            f"Supported: {', '.join(sorted(EXECUTORS))}"
        )

    jobs = [_normalize_item(item) for item in items]
    seen = set()
    for name, _ in jobs:
        if name in seen:
            raise ValueError(f"Duplicate batch item name: {name}")
        seen.add(name)
    outcomes: Dict[int, Union[PoseSequence, DecodeFailure]] = {}

    with EXECUTORS[config.batch_executor](max_workers=config.batch_workers) as pool:
        futures = {
            pool.submit(_decode_item, name, payload, config): index
            for index, (name, payload) in enumerate(jobs)
        }
        completed = concurrent.futures.as_completed(futures)
        for future in tqdm(completed, total=len(futures), desc='Decoding', disable=not config.show_progress):
            index = futures[future]
            name = jobs[index][0]
            try:
                outcomes[index] = future.result()
            except (AnimFormatError, OSError) as e:
                failure = DecodeFailure.from_error(name, e)
                logger.error(f"Failed to decode {failure}")
                outcomes[index] = failure
            except Exception as e:
                failure = DecodeFailure.from_error(name, e)
                logger.exception(f"Unexpected error decoding {name}")
                outcomes[index] = failure

    results: Dict[str, PoseSequence] = {}
    failures: List[DecodeFailure] = []
    for index, (name, _) in enumerate(jobs):
        outcome = outcomes[index]
        if isinstance(outcome, DecodeFailure):
            failures.append(outcome)
        else:
            results[name] = outcome

    logger.info(f"Batch decoded {len(results)}/{len(jobs)} files")
    return BatchReport(results=results, failures=failures)
