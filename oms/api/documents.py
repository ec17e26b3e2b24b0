import uuid

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from oms.api.serializers import employee_summary
from oms.core.access import get_current_employee, get_employee_or_404
from oms.core.notifications import create_notification
from oms.core.rbac import Role, require_roles
from oms.core.storage import DOCUMENT_POLICY, delete_file, file_exists, save_upload
from oms.db.session import get_db
from oms.models.document import DOCUMENT_STATUSES, Document
from oms.models.employee import Employee
from oms.models.user import User
from oms.schemas.common import MessageOut
from oms.schemas.document import DocumentOut, DocumentStatusUpdate

router = APIRouter(prefix="/documents", tags=["documents"])


def document_to_out(d: Document, include_employee: bool = False) -> DocumentOut:
    return DocumentOut(
        id=str(d.id),
        employee_id=str(d.employee_id),
        document_type=d.document_type,
        document_name=d.document_name,
        status=d.status,
        created_at=d.created_at,
        updated_at=d.updated_at,
        employee=employee_summary(d.employee) if include_employee and d.employee else None,
    )


@router.get("", response_model=list[DocumentOut])
def my_documents(
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    docs = (
        db.query(Document)
        .filter(Document.employee_id == employee.id)
        .order_by(Document.created_at.desc())
        .all()
    )
    return [document_to_out(d) for d in docs]


@router.post("/upload", response_model=DocumentOut, status_code=201)
def upload_document(
    document: UploadFile | None = File(default=None),
    document_type: str = Form(default=""),
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    if document is None or not document.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")
    if not document_type.strip():
        raise HTTPException(status_code=400, detail="Document type is required")

    path = save_upload(DOCUMENT_POLICY, document)
    doc = Document(
        employee_id=employee.id,
        document_type=document_type.strip(),
        document_name=document.filename,
        file_path=path,
        status="pending",
    )
    db.add(doc)
    try:
        db.commit()
    except Exception:
        delete_file(path)
        raise
    db.refresh(doc)
    return document_to_out(doc)


@router.get("/all", response_model=list[DocumentOut])
def all_documents(
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    docs = db.query(Document).order_by(Document.created_at.desc()).all()
    return [document_to_out(d, include_employee=True) for d in docs]


@router.get("/employee/{employee_id}", response_model=list[DocumentOut])
def employee_documents(
    employee_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    employee = get_employee_or_404(db, employee_id)
    docs = (
        db.query(Document)
        .filter(Document.employee_id == employee.id)
        .order_by(Document.created_at.desc())
        .all()
    )
    return [document_to_out(d) for d in docs]


@router.get("/{document_id}/download")
def download_document(
    document_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    doc = db.get(Document, document_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Document not found")
    if not file_exists(doc.file_path):
        raise HTTPException(status_code=404, detail="File not found on server")
    return FileResponse(doc.file_path, filename=doc.document_name)


@router.delete("/{document_id}", response_model=MessageOut)
def delete_document(
    document_id: uuid.UUID,
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    doc = (
        db.query(Document)
        .filter(Document.id == document_id, Document.employee_id == employee.id)
        .one_or_none()
    )
    if not doc:
        raise HTTPException(status_code=404, detail="Document not found")
    path = doc.file_path
    db.delete(doc)
    db.commit()
    delete_file(path)
    return MessageOut(message="Document deleted successfully")


@router.put("/{document_id}/status", response_model=DocumentOut)
def set_document_status(
    document_id: uuid.UUID,
    payload: DocumentStatusUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_roles(Role.ADMIN)),
):
    if payload.status not in DOCUMENT_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")
    doc = db.get(Document, document_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Document not found")

    doc.status = payload.status
    create_notification(
        db=db,
        recipient_id=doc.employee_id,
        title="Document Status Updated",
        message=f'Your document "{doc.document_name}" is now {payload.status}',
        type="document",
        priority="high" if payload.status == "rejected" else "low",
        action_url="/documents",
        related_id=doc.id,
        related_model="Document",
    )
    db.commit()
    db.refresh(doc)
    return document_to_out(doc, include_employee=True)
