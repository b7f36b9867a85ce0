"""
Test Suite for the Single-Pass Epoch Engine.

Uses scripted stub learners so the weighted accumulation, mode handling,
progress reporting and divergence guard can be checked exactly.
"""

import math
from unittest.mock import MagicMock

import pytest
import torch

from grove.exceptions import DatasetEmptyError, TrainingDivergedError
from grove.trainer.engine import EpochResult, accuracy_from_scores, count_correct, run_epoch

NUM_CLASSES = 10


def _batch(size: int, label: int = 0):
    return torch.zeros(size, 3, 4, 4), torch.full((size,), label, dtype=torch.long)


def _scores(labels: torch.Tensor, correct: bool) -> torch.Tensor:
    """One-hot scores that hit (or miss) every label."""
    target = labels if correct else (labels + 1) % NUM_CLASSES
    return torch.nn.functional.one_hot(target, NUM_CLASSES).float()


class ScriptedLearner:
    """Returns pre-scripted (loss, correct?) per training batch."""

    def __init__(self, script):
        self.script = list(script)
        self.modes = []
        self.train_calls = 0
        self.predict_calls = 0

    def set_mode(self, mode):
        self.modes.append(mode)

    def train_step(self, images, labels):
        loss, correct = self.script[self.train_calls]
        self.train_calls += 1
        return loss, _scores(labels, correct)

    def predict(self, images):
        self.predict_calls += 1
        return torch.zeros(images.size(0), NUM_CLASSES)

    def export_state(self):
        return {}

    def import_state(self, state):
        pass


# ACCURACY
@pytest.mark.unit
def test_accuracy_from_scores():
    scores = torch.tensor([[0.1, 0.9], [0.8, 0.2], [0.3, 0.7], [0.6, 0.4]])
    labels = torch.tensor([1, 0, 0, 1])
    assert accuracy_from_scores(scores, labels) == pytest.approx(0.5)
    assert count_correct(scores, labels) == 2


@pytest.mark.unit
def test_accuracy_is_exact_fraction_of_samples():
    """Three batches with one hit each give exactly 3/9, free of float32 rounding."""
    labels = torch.tensor([0, 1, 1])
    batches = [(torch.zeros(3, 3, 4, 4), labels) for _ in range(3)]

    result = run_epoch(ScriptedLearner([]), batches, train=False)

    assert result.mean_accuracy == 3 / 9


# TRAIN MODE
@pytest.mark.unit
def test_train_pass_weights_loss_by_batch_size():
    """Losses 1, 1, 4 over sizes 4, 4, 2 average to 1.6, not 2.0."""
    learner = ScriptedLearner([(1.0, True), (1.0, True), (4.0, False)])
    batches = [_batch(4), _batch(4), _batch(2)]

    result = run_epoch(learner, batches, train=True)

    assert isinstance(result, EpochResult)
    assert result.mean_loss == pytest.approx(1.6)
    assert result.mean_accuracy == pytest.approx(0.8)
    assert result.num_samples == 10
    assert result.num_batches == 3
    assert learner.modes == ["train"]
    assert learner.train_calls == 3
    assert learner.predict_calls == 0


@pytest.mark.unit
def test_single_short_batch():
    """A single batch smaller than the nominal size is fully counted."""
    learner = ScriptedLearner([(0.5, True)])

    result = run_epoch(learner, [_batch(3)], train=True)

    assert result.mean_loss == pytest.approx(0.5)
    assert result.mean_accuracy == pytest.approx(1.0)
    assert result.num_samples == 3


@pytest.mark.unit
@pytest.mark.parametrize("bad", [float("nan"), float("inf"), -float("inf")])
def test_divergence_guard(bad):
    """NaN/Inf training loss aborts the pass."""
    learner = ScriptedLearner([(0.5, True), (bad, True)])

    with pytest.raises(TrainingDivergedError, match="diverged"):
        run_epoch(learner, [_batch(2), _batch(2), _batch(2)], train=True, epoch=3)

    assert learner.train_calls == 2


@pytest.mark.unit
def test_empty_pass_raises():
    with pytest.raises(DatasetEmptyError):
        run_epoch(ScriptedLearner([]), [], train=True)


# EVAL MODE
@pytest.mark.unit
def test_eval_pass_uses_predict_and_cross_entropy():
    """Uniform scores over 10 classes give loss ln(10); state is never updated."""
    learner = ScriptedLearner([])
    batches = [_batch(4), _batch(4), _batch(2)]

    result = run_epoch(learner, batches, train=False)

    assert learner.modes == ["eval"]
    assert learner.train_calls == 0
    assert learner.predict_calls == 3
    assert result.mean_loss == pytest.approx(math.log(NUM_CLASSES), rel=1e-6)
    # argmax of all-zero scores is class 0, and every label is 0
    assert result.mean_accuracy == pytest.approx(1.0)


@pytest.mark.unit
def test_eval_pass_runs_without_grad():
    """predict is invoked with autograd disabled."""
    seen = []
    learner = ScriptedLearner([])

    def predict(images):
        seen.append(torch.is_grad_enabled())
        return torch.zeros(images.size(0), NUM_CLASSES)

    learner.predict = predict

    run_epoch(learner, [_batch(2)], train=False)

    assert seen == [False]


@pytest.mark.unit
def test_eval_accuracy_weighted():
    """Eval accuracy is weighted by batch size as well."""
    learner = ScriptedLearner([])
    batches = [_batch(4, label=0), _batch(4, label=0), _batch(2, label=5)]

    result = run_epoch(learner, batches, train=False)

    assert result.mean_accuracy == pytest.approx(0.8)


# PROGRESS
@pytest.mark.unit
def test_progress_callback_receives_running_stats():
    """Every log_every batches the running weighted stats are reported."""
    learner = ScriptedLearner([(1.0, True), (3.0, False), (2.0, True), (2.0, True)])
    callback = MagicMock()
    batches = [_batch(2), _batch(2), _batch(2), _batch(2)]

    run_epoch(learner, batches, train=True, log_every=2, progress_callback=callback)

    assert callback.call_count == 2
    first, second = callback.call_args_list
    assert first.args[0] == 2
    assert first.args[1] == pytest.approx(2.0)
    assert first.args[2] == pytest.approx(0.5)
    assert second.args[0] == 4
    assert second.args[1] == pytest.approx(2.0)
    assert second.args[2] == pytest.approx(0.75)


@pytest.mark.unit
def test_progress_disabled_by_default():
    callback = MagicMock()
    run_epoch(
        ScriptedLearner([(1.0, True)] * 3),
        [_batch(1)] * 3,
        train=True,
        progress_callback=callback,
    )
    callback.assert_not_called()


@pytest.mark.unit
def test_progress_is_logged(grove_caplog):
    run_epoch(ScriptedLearner([(1.0, True)] * 2), [_batch(1)] * 2, train=True, log_every=1, epoch=7)
    messages = [r.getMessage() for r in grove_caplog.records]
    assert any("epoch 7 batch 2" in m for m in messages)


@pytest.mark.unit
def test_tqdm_does_not_change_result():
    script = [(1.0, True), (2.0, False)]
    plain = run_epoch(ScriptedLearner(script), [_batch(3), _batch(1)], train=True)
    with_bar = run_epoch(
        ScriptedLearner(script), [_batch(3), _batch(1)], train=True, use_tqdm=True
    )
    assert plain == with_bar
