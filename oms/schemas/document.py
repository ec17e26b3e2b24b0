from datetime import datetime

from pydantic import BaseModel

from oms.schemas.common import EmployeeSummary


class DocumentStatusUpdate(BaseModel):
    status: str


class DocumentOut(BaseModel):
    id: str
    employee_id: str
    document_type: str
    document_name: str
    status: str
    created_at: datetime
    updated_at: datetime
    employee: EmployeeSummary | None = None
