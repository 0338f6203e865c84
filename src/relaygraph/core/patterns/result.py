"""Results of pattern executions."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

class StepStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"

class AgentStepResult(BaseModel):
    """Outcome of one agent invocation.

    Attributes:
        agent_name: Agent that ran (or was skipped)
        input: Input the agent received
        output: Agent output, when it succeeded
        execution_time_ms: Wall time of the invocation
        success: Whether the invocation succeeded
        status: SUCCEEDED, FAILED or SKIPPED (not attempted)
        error_message: Failure or skip reason
    """
    agent_name: str
    input: Optional[str] = None
    output: Optional[str] = None
    execution_time_ms: float = 0.0
    success: bool = False
    status: StepStatus = StepStatus.SUCCEEDED
    error_message: Optional[str] = None

    @classmethod
    def skipped(cls, agent_name: str, reason: str) -> "AgentStepResult":
        return cls(agent_name=agent_name, status=StepStatus.SKIPPED, error_message=reason)

class ExecutionStep(BaseModel):
    """Audit entry for one step of an execution."""
    step_number: int
    agent_name: str
    action: str
    timestamp: datetime = Field(default_factory=datetime.now)
    details: str = ""

class WorkflowResult(BaseModel):
    """
    Outcome of a pattern execution.

    Attributes:
        final_result: Final text output
        success: Whether the execution succeeded
        error_message: Human-readable failure description
        agent_results: Step results keyed by agent (or step) name
        execution_steps: Ordered audit trail
        total_execution_time_ms: Wall time of the whole execution
        pattern: Pattern code
    """
    final_result: Optional[str] = None
    success: bool = True
    error_message: Optional[str] = None
    agent_results: Dict[str, AgentStepResult] = Field(default_factory=dict)
    execution_steps: List[ExecutionStep] = Field(default_factory=list)
    total_execution_time_ms: float = 0.0
    pattern: Optional[str] = None

    @classmethod
    def completed(cls, final_result: Optional[str], **kwargs) -> "WorkflowResult":
        return cls(success=True, final_result=final_result, **kwargs)

    @classmethod
    def failure(cls, error_message: str, **kwargs) -> "WorkflowResult":
        return cls(success=False, error_message=error_message, **kwargs)

    def add_agent_result(self, key: str, result: AgentStepResult) -> None:
        self.agent_results[key] = result

    def add_step(self, agent_name: str, action: str, details: str = "") -> ExecutionStep:
        step = ExecutionStep(
            step_number=len(self.execution_steps) + 1,
            agent_name=agent_name,
            action=action,
            details=details,
        )
        self.execution_steps.append(step)
        return step

    def fail(self, error_message: str) -> None:
        self.success = False
        self.error_message = error_message

    @property
    def agent_timings(self) -> Dict[str, float]:
        return {key: step.execution_time_ms for key, step in self.agent_results.items()}

    @property
    def failed_agents(self) -> List[str]:
        return [
            key for key, step in self.agent_results.items()
            if step.status == StepStatus.FAILED
        ]
