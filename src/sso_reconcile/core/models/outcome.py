"""Outcome models for the best-effort steps of a reconciliation."""

from typing import Literal

from pydantic import BaseModel, Field

StepName = Literal["groups", "identity", "avatar", "approval"]
Trigger = Literal["provisioning", "login"]


class StepOutcome(BaseModel):
    """Result of one reconciliation step: ok, skipped with a reason, or failed."""

    step: StepName
    status: Literal["ok", "skipped", "failed"]
    reason: str | None = Field(default=None, description="Why the step was skipped")
    error: str | None = Field(default=None, description="Error text of a failed step")

    @classmethod
    def ok(cls, step: StepName) -> "StepOutcome":
        return cls(step=step, status="ok")

    @classmethod
    def skipped(cls, step: StepName, reason: str) -> "StepOutcome":
        return cls(step=step, status="skipped", reason=reason)

    @classmethod
    def failed(cls, step: StepName, error: BaseException | str) -> "StepOutcome":
        if isinstance(error, BaseException):
            text = f"{type(error).__name__}: {error}"
        else:
            text = error
        return cls(step=step, status="failed", error=text)

    @property
    def is_ok(self) -> bool:
        return self.status == "ok"

    @property
    def is_skipped(self) -> bool:
        return self.status == "skipped"

    @property
    def is_failed(self) -> bool:
        return self.status == "failed"


class ReconciliationReport(BaseModel):
    """Everything one reconciliation run did to a user."""

    trigger: Trigger
    scheme: str
    user_name: str | None = None
    outcomes: list[StepOutcome] = Field(default_factory=list)

    def add(self, outcome: StepOutcome) -> StepOutcome:
        self.outcomes.append(outcome)
        return outcome

    def outcome_for(self, step: StepName) -> StepOutcome | None:
        for outcome in self.outcomes:
            if outcome.step == step:
                return outcome
        return None

    @property
    def failures(self) -> list[StepOutcome]:
        return [outcome for outcome in self.outcomes if outcome.is_failed]

    def summary(self) -> str:
        parts = []
        for outcome in self.outcomes:
            detail = outcome.reason or outcome.error
            parts.append(f"{outcome.step}={outcome.status}" + (f" ({detail})" if detail else ""))
        return ", ".join(parts) or "nothing to do"
