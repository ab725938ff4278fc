"""AnimLogo - generate a logo image with Gemini and animate it with Veo.

The pipeline lives in animlogo.pipeline (image and video generation) and
animlogo.orchestrator (workflow state machine and progress reporting).
Hosts drive it through animlogo.orchestrator.workflow.LogoWorkflow.
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
