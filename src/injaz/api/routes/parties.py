"""Party endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from injaz.api.deps import get_db, get_org_id
from injaz.api.schemas import PartyCreate, PartyUpdate, document_out
from injaz.services import parties, payments

router = APIRouter(prefix="/api/parties", tags=["parties"])


@router.get("")
def list_parties(
    type: str | None = None,
    q: str | None = Query(default=None, description="Name search"),
    org_id: str = Depends(get_org_id),
    db: Session = Depends(get_db),
) -> list[dict[str, Any]]:
    if q:
        found = parties.search_parties(db, org_id, q, type=type)
    else:
        found = parties.list_parties(db, org_id, type=type)
    return [party.to_dict() for party in found]


@router.get("/stats")
def party_stats(org_id: str = Depends(get_org_id), db: Session = Depends(get_db)) -> dict[str, int]:
    return parties.party_stats(db, org_id)


@router.get("/{party_id}")
def get_party(party_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    return parties.get_party(db, party_id).to_dict()


@router.get("/{party_id}/unpaid-documents")
def unpaid_documents(party_id: str, db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    parties.get_party(db, party_id)
    return [document_out(d) for d in payments.unpaid_documents_for_party(db, party_id)]


@router.post("", status_code=201)
def create_party(
    body: PartyCreate, org_id: str = Depends(get_org_id), db: Session = Depends(get_db)
) -> dict[str, Any]:
    party = parties.create_party(db, org_id, body.model_dump())
    db.commit()
    return party.to_dict()


@router.patch("/{party_id}")
def update_party(party_id: str, body: PartyUpdate, db: Session = Depends(get_db)) -> dict[str, Any]:
    party = parties.update_party(db, party_id, body.changes())
    db.commit()
    return party.to_dict()


@router.delete("/{party_id}", status_code=204)
def delete_party(party_id: str, db: Session = Depends(get_db)) -> None:
    parties.delete_party(db, party_id)
    db.commit()
