"""
Test Suite for Reproducibility Utilities.

Covers global seeding, explicit generators and DataLoader worker seeding.
"""

import random
from unittest.mock import MagicMock, patch

import numpy as np
import pytest
import torch

from grove.core import make_generator, set_seed, worker_init_fn
from grove.core.environment import detect_best_device, to_device_obj


# SET SEED
@pytest.mark.unit
def test_set_seed_reproducibility_cpu():
    """set_seed makes Python, NumPy and torch draws repeatable."""
    set_seed(123)
    a1, b1, c1 = random.random(), np.random.rand(), torch.rand(1)

    set_seed(123)
    a2, b2, c2 = random.random(), np.random.rand(), torch.rand(1)

    assert a1 == a2
    assert b1 == b2
    assert torch.equal(c1, c2)


@pytest.mark.unit
def test_set_seed_strict_mode():
    with patch("torch.use_deterministic_algorithms") as mock_det:
        set_seed(1, strict=True)
    mock_det.assert_called_once_with(True)


# GENERATORS
@pytest.mark.unit
def test_make_generator_is_independent_of_global_state():
    g1 = make_generator(7)
    torch.manual_seed(0)
    g2 = make_generator(7)

    assert torch.equal(torch.rand(4, generator=g1), torch.rand(4, generator=g2))


@pytest.mark.unit
def test_make_generator_accepts_large_seeds():
    g = make_generator(2**64 + 5)
    assert torch.rand(1, generator=g).numel() == 1


# WORKERS
@pytest.mark.unit
def test_worker_init_fn_outside_worker_is_noop():
    state = torch.get_rng_state()
    worker_init_fn(0)
    assert torch.equal(state, torch.get_rng_state())


@pytest.mark.unit
def test_worker_init_fn_seeds_from_worker_info():
    info = MagicMock(seed=1000)
    with patch("torch.utils.data.get_worker_info", return_value=info):
        worker_init_fn(2)
        first = torch.rand(1)
        worker_init_fn(2)
        second = torch.rand(1)
    assert torch.equal(first, second)


# HARDWARE
@pytest.mark.unit
def test_detect_best_device_cpu_only():
    with patch("torch.cuda.is_available", return_value=False), patch(
        "torch.backends.mps.is_available", return_value=False
    ):
        assert detect_best_device() == "cpu"


@pytest.mark.unit
def test_to_device_obj():
    assert to_device_obj("cpu") == torch.device("cpu")


@pytest.mark.unit
def test_get_cuda_name_without_cuda():
    from grove.core.environment import get_cuda_name

    with patch("torch.cuda.is_available", return_value=False):
        assert get_cuda_name() == ""
