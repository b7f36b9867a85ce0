"""
Reproducibility Environment.

Seeds the process-wide PRNGs once at startup (weight initialization) and
builds the explicit ``torch.Generator`` objects that drive per-epoch
shuffling and dropout, so a resumed run reproduces an uninterrupted one.
"""

import logging
import random

import numpy as np
import torch

from ..paths import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


def set_seed(seed: int, strict: bool = False) -> None:
    """Seed Python, NumPy and PyTorch, optionally enforcing deterministic kernels.

    Only affects code that still draws from the global generators (layer
    initialization). Shuffling and dropout use explicit generators.

    Args:
        seed: The seed value to set across all PRNGs.
        strict: If True, enforces deterministic algorithms.
    """
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)

    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(seed)
        torch.backends.cudnn.deterministic = True
        torch.backends.cudnn.benchmark = False

    if strict:
        torch.use_deterministic_algorithms(True)
        logger.info("STRICT REPRODUCIBILITY ENABLED: Using deterministic algorithms.")


def make_generator(seed: int) -> torch.Generator:
    """
    Build a CPU ``torch.Generator`` seeded with ``seed``.

    Args:
        seed: Seed for the generator (reduced modulo 2**63).

    Returns:
        Freshly seeded generator.
    """
    generator = torch.Generator()
    generator.manual_seed(seed % 2**63)
    return generator


def worker_init_fn(worker_id: int) -> None:
    """Initialize PRNGs for a DataLoader worker subprocess.

    Each worker receives a unique but deterministic sub-seed derived from
    the parent seed. Called by DataLoader when ``num_workers > 0``.

    Args:
        worker_id: Subprocess ID provided by DataLoader (0-based).
    """
    worker_info = torch.utils.data.get_worker_info()
    if worker_info is None:
        return

    seed = (worker_info.seed + worker_id) % 2**32

    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
