from datetime import datetime

from pydantic import BaseModel


class OnboardingStepOut(BaseModel):
    id: str
    employee_id: str
    step_name: str
    step_description: str | None
    order_index: int
    completed: bool
    completed_at: datetime | None


class OnboardingStatusOut(BaseModel):
    status: str
    progress: float
    total_steps: int
    completed_steps: int
