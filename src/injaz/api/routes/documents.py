"""Document endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from injaz.api.deps import get_db, get_org_id
from injaz.api.schemas import DocumentCreate, StatusUpdate, document_out
from injaz.services import documents

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.get("")
def list_documents(
    type: str | None = None, org_id: str = Depends(get_org_id), db: Session = Depends(get_db)
) -> list[dict[str, Any]]:
    return [document_out(d) for d in documents.list_documents(db, org_id, type=type)]


@router.get("/stats")
def document_stats(org_id: str = Depends(get_org_id), db: Session = Depends(get_db)) -> dict[str, int]:
    return documents.document_stats(db, org_id)


@router.get("/next-number")
def next_number(
    type: str, org_id: str = Depends(get_org_id), db: Session = Depends(get_db)
) -> dict[str, str]:
    return {"number": documents.next_document_number(db, org_id, type)}


@router.get("/{document_id}")
def get_document(document_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    document = documents.get_document(db, document_id)
    data = document_out(document)
    data["allocations"] = [a.to_dict() for a in document.allocations]
    return data


@router.post("", status_code=201)
def create_document(
    body: DocumentCreate, org_id: str = Depends(get_org_id), db: Session = Depends(get_db)
) -> dict[str, Any]:
    fields = body.model_dump()
    document = documents.create_document(db, org_id, **fields)
    db.commit()
    return document_out(document)


@router.patch("/{document_id}/status")
def update_status(document_id: str, body: StatusUpdate, db: Session = Depends(get_db)) -> dict[str, Any]:
    document = documents.update_document_status(db, document_id, body.status)
    db.commit()
    return document_out(document)


@router.delete("/{document_id}", status_code=204)
def delete_document(document_id: str, db: Session = Depends(get_db)) -> None:
    documents.delete_document(db, document_id)
    db.commit()
