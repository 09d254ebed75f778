"""
Workflow Logging Module

Logs workflow events for agentflow workflows.
"""
from agentflow.logging.workflow_logger import WorkflowLogger

__all__ = ['WorkflowLogger']
