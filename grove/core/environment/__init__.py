"""
Environment & Infrastructure Abstraction Layer.

Hardware discovery and reproducibility protocols (global seeding, explicit
generators, DataLoader worker seeding).
"""

from .hardware import detect_best_device, get_cuda_name, to_device_obj
from .reproducibility import make_generator, set_seed, worker_init_fn

__all__ = [
    "detect_best_device",
    "get_cuda_name",
    "to_device_obj",
    "make_generator",
    "set_seed",
    "worker_init_fn",
]
