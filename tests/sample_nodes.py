"""Nodes shared by the workflow tests."""

import asyncio

from agentflow import BaseNode, Edge, NodeContext, Workflow, WorkflowState


class StartNode(BaseNode):
    def execute(self, state: WorkflowState, context: NodeContext) -> WorkflowState:
        return state.set("step", "start")


class MiddleNode(BaseNode):
    def execute(self, state: WorkflowState, context: NodeContext) -> WorkflowState:
        state.set("step", "middle")
        return state.set("counter", state.get("counter", 0) + 1)


class ConditionalNode(BaseNode):
    def execute(self, state: WorkflowState, context: NodeContext) -> WorkflowState:
        return state.set("should_loop", state.get("counter", 0) < 3)


class FinishNode(BaseNode):
    def execute(self, state: WorkflowState, context: NodeContext) -> WorkflowState:
        return state.set("step", "end")


class AsyncMiddleNode(BaseNode):
    node_id = "async_middle"

    async def execute(self, state: WorkflowState, context: NodeContext) -> WorkflowState:
        await asyncio.sleep(0)
        return state.set("async_visited", True)


class BeforeInterruptNode(BaseNode):
    def execute(self, state: WorkflowState, context: NodeContext) -> WorkflowState:
        return state.set("value", state.get("value", 0) * 2)


class InterruptNode(BaseNode):
    """Ask for approval, then add 2 to ``value`` once approved."""

    def execute(self, state: WorkflowState, context: NodeContext):
        if not context.is_resuming:
            return self.suspend({"question": "test"}, state)
        state.set("feedback", context.resume_data)
        if context.resume_data.get("status") == "approved":
            state.set("value", state.get("value") + 2)
        return self.proceed(state)


class AfterInterruptNode(BaseNode):
    def execute(self, state: WorkflowState, context: NodeContext) -> WorkflowState:
        return state.set("final_value", state.get("value") + 10)


class SecondInterruptNode(BaseNode):
    def execute(self, state: WorkflowState, context: NodeContext):
        if not context.is_resuming:
            return self.suspend({"question": "second"})
        return state.set("second_answer", context.resume_data.get("answer"))


class FailingNode(BaseNode):
    def execute(self, state: WorkflowState, context: NodeContext) -> WorkflowState:
        raise RuntimeError("node exploded")


def build_interrupt_workflow(persistence, workflow_id="test_workflow"):
    """BeforeInterrupt --> Interrupt --> AfterInterrupt"""
    return (
        Workflow(persistence, workflow_id)
        .add_nodes([BeforeInterruptNode(), InterruptNode(), AfterInterruptNode()])
        .add_edges([
            Edge(BeforeInterruptNode, InterruptNode),
            Edge(InterruptNode, AfterInterruptNode),
        ])
        .set_start(BeforeInterruptNode)
        .set_end(AfterInterruptNode)
    )
