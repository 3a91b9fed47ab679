#!/usr/bin/env python3
# src/chemcore/services/batch.py
"""
Batch fingerprinting of SMILES strings.

Inputs are fanned out over a process pool; failures are logged and
reported per input instead of aborting the batch.
"""

import logging
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from tqdm import tqdm

from ..domain.models.fingerprint import Fingerprint
from ..exceptions import ChemCoreError
from ..io.smiles import SmilesParser
from ..utils.benchmarking import ThroughputStats, Timer
from .fingerprint_service import FingerprintBuilder, FingerprintParameters

logger = logging.getLogger(__name__)

# (input index, fingerprint hex or None, error message or None, seconds)
WorkerResult = Tuple[int, Optional[str], Optional[str], float]


@dataclass
class BatchResult:
    """Outcome of a batch run.

    Attributes:
        fingerprints: One entry per input, None where the input failed
        errors: Error message by input index
        stats: Timing and success counts
    """

    fingerprints: List[Optional[Fingerprint]]
    errors: Dict[int, str] = field(default_factory=dict)
    stats: Optional[ThroughputStats] = None

    @property
    def succeeded(self) -> int:
        return sum(1 for fp in self.fingerprints if fp is not None)


def fingerprint_smiles(args: Tuple[int, str, FingerprintParameters]) -> WorkerResult:
    """Parse and fingerprint one SMILES string.

    Args:
        args: Tuple containing (index, smiles, params)

    Returns:
        Tuple of (index, fingerprint hex, error message, elapsed seconds)
    """
    index, smiles, params = args
    start = time.perf_counter()
    try:
        mol = SmilesParser().parse(smiles)
        fp = FingerprintBuilder(mol, params).build()
        return index, fp.to_hex(), None, time.perf_counter() - start
    except ChemCoreError as e:
        return index, None, str(e), time.perf_counter() - start


def fingerprint_smiles_batch(
    smiles: Sequence[str],
    params: Optional[FingerprintParameters] = None,
    num_processes: int = 4,
    show_progress: bool = True,
) -> BatchResult:
    """Fingerprint many SMILES strings in parallel.

    Args:
        smiles: Input SMILES strings
        params: Fingerprint settings shared by every input
        num_processes: Worker processes; 1 runs everything in this process
        show_progress: Display a tqdm progress bar

    Returns:
        BatchResult with fingerprints in input order
    """
    params = params or FingerprintParameters()
    tasks = [(i, text, params) for i, text in enumerate(smiles)]
    result = BatchResult(fingerprints=[None] * len(tasks))
    stats = ThroughputStats(name="fingerprint_smiles_batch")

    with Timer("fingerprint_smiles_batch") as timer:
        with tqdm(total=len(tasks), desc="Fingerprinting", disable=not show_progress) as pbar:
            if num_processes <= 1:
                for task in tasks:
                    _collect(fingerprint_smiles(task), params, result, stats)
                    pbar.update(1)
            else:
                with ProcessPoolExecutor(max_workers=num_processes) as executor:
                    futures = [executor.submit(fingerprint_smiles, task) for task in tasks]
                    for future in as_completed(futures):
                        _collect(future.result(), params, result, stats)
                        pbar.update(1)

    stats.total_time = timer.elapsed()
    result.stats = stats
    logger.info(str(stats))
    return result


def _collect(
    worker_result: WorkerResult,
    params: FingerprintParameters,
    result: BatchResult,
    stats: ThroughputStats,
) -> None:
    index, fp_hex, error, elapsed = worker_result
    if error is not None:
        logger.warning(f"Skipping input {index}: {error}")
        result.errors[index] = error
        stats.add_item(elapsed, ok=False)
        return
    result.fingerprints[index] = Fingerprint.from_hex(params.fp_type, params.size, fp_hex)
    stats.add_item(elapsed)
