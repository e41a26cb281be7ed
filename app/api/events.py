"""
Event store inspection and outcome reporting.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional

from app.api.deps import get_event_store
from app.schemas.event import EventRecord as EventRecordSchema, EventProcessedReport
from app.services.event_store import EventStore

router = APIRouter()


@router.get("/unprocessed", response_model=List[EventRecordSchema])
def list_unprocessed(
    max_attempts: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    store: EventStore = Depends(get_event_store)
):
    """Pending events below the retry cutoff, oldest first"""
    return store.scan_unprocessed(max_attempts, limit)


@router.get("/exhausted", response_model=List[EventRecordSchema])
def list_exhausted(
    max_attempts: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    store: EventStore = Depends(get_event_store)
):
    """Unprocessed events that reached the retry cutoff"""
    return store.scan_exhausted(max_attempts, limit)


@router.get("/{event_id}", response_model=EventRecordSchema)
def get_event(
    event_id: int,
    store: EventStore = Depends(get_event_store)
):
    record = store.get(event_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found"
        )
    return record


@router.post("/{event_id}/processed", response_model=EventRecordSchema)
def report_processed(
    event_id: int,
    report: EventProcessedReport,
    store: EventStore = Depends(get_event_store)
):
    """Record the outcome of one processing attempt"""
    if not store.mark_processed(event_id, report.success, report.error_message):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found"
        )
    return store.get(event_id)
