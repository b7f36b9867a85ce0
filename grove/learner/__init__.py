"""
Learner Package.

The ``LearnerProtocol`` capability and its default PyTorch backend.
"""

from .protocol import LearnerProtocol, Mode
from .simple_cnn import GeneratorDropout, SimpleCNN
from .torch_learner import TorchLearner, build_torch_learner

__all__ = [
    "LearnerProtocol",
    "Mode",
    "GeneratorDropout",
    "SimpleCNN",
    "TorchLearner",
    "build_torch_learner",
]
