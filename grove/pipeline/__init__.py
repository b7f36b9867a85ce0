"""
Pipeline Orchestration Module.

Reusable phase functions that turn a validated ``Config`` into a run.

Example:
    >>> from grove.pipeline import run_training_phase
    >>> summary = run_training_phase(Config.from_recipe(Path("recipe.yaml")))
"""

from .phases import run_training_phase

__all__ = ["run_training_phase"]
