"""
Label issuance workflow.
Cart, checkout, generation, print and order reconciliation as one state machine.
"""

from shipping_gateway.workflow.engine import LabelWorkflow
from shipping_gateway.workflow.stages import (
    WorkflowStage,
    WorkflowState,
    extract_tracking_code,
)

__all__ = ["LabelWorkflow", "WorkflowStage", "WorkflowState", "extract_tracking_code"]
