import io
import csv
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from blitzweek.core.deps import get_current_admin
from blitzweek.db.session import get_db
from blitzweek.schemas import StatusUpdate
from blitzweek.services import registration_service

# Every route here requires an admin token
router = APIRouter(dependencies=[Depends(get_current_admin)])
logger = logging.getLogger(__name__)

# ==============================================================================
# 1. LIST REGISTRATIONS (With Filters & Pagination)
# ==============================================================================
@router.get("/registrations")
def list_registrations(
    page: int = 1,
    limit: Optional[int] = None,
    event: Optional[str] = None,
    branch: Optional[str] = None,
    year: Optional[str] = None,
    sortBy: str = "registrationDate",
    order: str = "desc",
    db: Session = Depends(get_db)
):
    """
    Get registrations with pagination (1-based pages).
    Optional: ?event=ScaleUp Blitz&branch=...&year=... to filter.
    """
    data, pagination = registration_service.list_registrations(
        db,
        page=page,
        limit=limit,
        event=event,
        branch=branch,
        year=year,
        sort_by=sortBy,
        order=order,
    )
    return {
        "success": True,
        "data": data,
        "pagination": pagination
    }

# ==============================================================================
# 2. EXPORT (JSON rows or CSV file)
# ==============================================================================
@router.get("/registrations/export")
def export_registrations(
    format: str = Query("json", pattern="^(json|csv)$"),
    db: Session = Depends(get_db)
):
    """Flattened registrations, newest first. ?format=csv downloads a file."""
    rows = registration_service.export_registrations(db)
    logger.info(f"📤 [Admin] Exported {len(rows)} registrations as {format}")

    if format == "csv":
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=registration_service.EXPORT_COLUMNS)
        writer.writeheader()
        writer.writerows(rows)
        return Response(
            content=output.getvalue(),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="registrations.csv"'}
        )

    return {
        "success": True,
        "data": rows,
        "count": len(rows)
    }

# ==============================================================================
# 3. UPDATE STATUS
# ==============================================================================
@router.put("/registration/{registration_number}/status")
def update_status(
    registration_number: str,
    payload: StatusUpdate,
    db: Session = Depends(get_db)
):
    data = registration_service.update_status(db, registration_number, payload.status)
    return {
        "success": True,
        "message": "Status updated successfully",
        "data": data
    }

# ==============================================================================
# 4. DELETE REGISTRATION
# ==============================================================================
@router.delete("/registration/{registration_number}")
def delete_registration(registration_number: str, db: Session = Depends(get_db)):
    """Hard delete. Nothing references a registration, so nothing cascades."""
    registration_service.delete_registration(db, registration_number)
    return {
        "success": True,
        "message": "Registration deleted successfully"
    }
