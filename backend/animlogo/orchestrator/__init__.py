"""Workflow orchestrator module.

Provides state machine coordination for the logo generation pipeline with:
- Workflow states and allowed transitions
- The LogoWorkflow action surface for presentation hosts
- Single-slot progress reporting
"""

__all__ = []
