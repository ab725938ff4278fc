"""Tests for workflow transition rules and the progress reporter."""

import pytest

from animlogo.orchestrator.progress import PROCESSING, SUBMITTING, ProgressReporter, describe
from animlogo.orchestrator.state import WORKFLOW_STATES, WorkflowState, can_transition

S = WorkflowState


@pytest.mark.parametrize("current, target", [
    (S.AWAITING_CREDENTIAL, S.COMPOSING_LOGO),
    (S.COMPOSING_LOGO, S.COMPOSING_ANIMATION),
    (S.COMPOSING_LOGO, S.COMPOSING_LOGO),
    (S.COMPOSING_ANIMATION, S.COMPLETE),
    (S.COMPOSING_ANIMATION, S.AWAITING_CREDENTIAL),
    (S.COMPOSING_ANIMATION, S.COMPOSING_ANIMATION),
    (S.COMPOSING_ANIMATION, S.COMPOSING_LOGO),
    (S.COMPLETE, S.COMPOSING_LOGO),
])
def test_allowed_transitions(current, target):
    assert can_transition(current, target)


@pytest.mark.parametrize("current, target", [
    (S.AWAITING_CREDENTIAL, S.COMPOSING_ANIMATION),
    (S.AWAITING_CREDENTIAL, S.COMPLETE),
    (S.COMPOSING_LOGO, S.COMPLETE),
    (S.COMPLETE, S.COMPOSING_ANIMATION),
    (S.COMPLETE, S.AWAITING_CREDENTIAL),
])
def test_forbidden_transitions(current, target):
    assert not can_transition(current, target)


def test_every_state_is_described():
    assert set(WORKFLOW_STATES) == set(WorkflowState)


# ---------------------------------------------------------------------------
# Progress reporter
# ---------------------------------------------------------------------------
def test_reporter_keeps_only_latest_label():
    reporter = ProgressReporter()

    reporter.report(SUBMITTING)
    reporter(PROCESSING)

    assert reporter.latest == PROCESSING


def test_reporter_notifies_and_unsubscribes():
    reporter = ProgressReporter()
    seen = []
    unsubscribe = reporter.subscribe(seen.append)

    reporter.report(SUBMITTING)
    reporter.clear()
    unsubscribe()
    reporter.report(PROCESSING)

    assert seen == [SUBMITTING, None]
    assert reporter.latest == PROCESSING


def test_describe_labels():
    assert describe(SUBMITTING) == "Initiating video generation..."
    assert "Processing video" in describe(PROCESSING)
    assert describe("custom") == "custom"
