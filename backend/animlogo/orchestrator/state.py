"""State machine constants and transition logic for the logo workflow.

Defines the four workflow states, the transitions allowed between them and
the user-facing messages attached to failure transitions.
"""

from enum import Enum
from typing import Dict, FrozenSet


class WorkflowState(str, Enum):
    AWAITING_CREDENTIAL = "awaiting_credential"
    COMPOSING_LOGO = "composing_logo"
    COMPOSING_ANIMATION = "composing_animation"
    COMPLETE = "complete"


WORKFLOW_STATES = {
    WorkflowState.AWAITING_CREDENTIAL: "Waiting for the user to select an API key",
    WorkflowState.COMPOSING_LOGO: "Describing and generating the logo image",
    WorkflowState.COMPOSING_ANIMATION: "Logo ready, configuring and generating the animation",
    WorkflowState.COMPLETE: "Animated logo ready",
}

# Allowed transitions (self-loops are failure paths that keep the state)
TRANSITIONS: Dict[WorkflowState, FrozenSet[WorkflowState]] = {
    WorkflowState.AWAITING_CREDENTIAL: frozenset({
        WorkflowState.COMPOSING_LOGO,
        WorkflowState.AWAITING_CREDENTIAL,
    }),
    WorkflowState.COMPOSING_LOGO: frozenset({
        WorkflowState.COMPOSING_ANIMATION,
        WorkflowState.COMPOSING_LOGO,
    }),
    WorkflowState.COMPOSING_ANIMATION: frozenset({
        WorkflowState.COMPLETE,
        WorkflowState.AWAITING_CREDENTIAL,
        WorkflowState.COMPOSING_LOGO,
        WorkflowState.COMPOSING_ANIMATION,
    }),
    WorkflowState.COMPLETE: frozenset({
        WorkflowState.COMPOSING_LOGO,
        WorkflowState.COMPLETE,
    }),
}

# States that require a generated image / video to be held
STATES_WITH_IMAGE = frozenset({WorkflowState.COMPOSING_ANIMATION, WorkflowState.COMPLETE})
STATES_WITH_VIDEO = frozenset({WorkflowState.COMPLETE})

CREDENTIAL_EXPIRED_MESSAGE = "Your API key session might have expired. Please re-select your key."
LOGO_FAILED_PREFIX = "Failed to generate logo."
ANIMATION_FAILED_PREFIX = "Failed to animate logo."


def can_transition(current: WorkflowState, target: WorkflowState) -> bool:
    """Check if the workflow may move from current to target.

    Args:
        current: State the workflow is in
        target: Requested next state

    Returns:
        True if the transition is allowed, False otherwise
    """
    return target in TRANSITIONS.get(current, frozenset())
