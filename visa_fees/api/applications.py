"""
Applications API - CRUD, report, CSV export and receipts

Mutations go through ApplicationService, which returns result values.
This module only maps those results onto HTTP status codes.
"""
import json
import logging
import re
from datetime import date
from typing import Any, List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from visa_fees.api.dependencies import get_application_service, get_receipt_counter
from visa_fees.application.application_service import ApplicationService, ErrorKind, MutationResult
from visa_fees.domain.entities import Application
from visa_fees.domain.value_objects import ReceiptNumber
from visa_fees.services.receipt_service import (
    Receipt,
    ReceiptCounter,
    render_receipt_html,
    render_receipt_pdf,
)
from visa_fees.services.report_service import (
    CSV_FILENAME,
    DEFAULT_PAGE_SIZE,
    ReportQuery,
    build_report,
    render_csv,
)

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_STATUS = {
    ErrorKind.STRUCTURAL: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.SEMANTIC: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.SERVICE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
}

# Anything else in a download name is replaced in the plain filename= fallback
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")

RECEIPT_NOT_FOUND_HTML = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"><title>Receipt Not Found</title></head>
<body style="font-family: sans-serif; text-align: center; padding: 4rem;">
  <h1>Receipt Not Found</h1>
  <p>We could not find the visa application receipt you were looking for. It may have been moved or deleted.</p>
  <p><a href="/">Return to Dashboard</a></p>
</body>
</html>
"""


# ============================================
# Pydantic Models
# ============================================

class ApplicationResponse(BaseModel):
    """Application as shown to the presentation layer (camelCase)"""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    full_name: str = Field(..., alias="fullName")
    passport_number: str = Field(..., alias="passportNumber")
    address: str
    application_date: date = Field(..., alias="applicationDate")
    amount_paid: float = Field(..., alias="amountPaid")

    @classmethod
    def from_entity(cls, application: Application) -> "ApplicationResponse":
        return cls(
            id=application.id,
            full_name=application.full_name,
            passport_number=application.passport_number,
            address=application.address,
            application_date=application.application_date,
            amount_paid=application.amount_paid,
        )


class ReportResponse(BaseModel):
    """One page of the applications table"""
    model_config = ConfigDict(populate_by_name=True)

    rows: List[ApplicationResponse]
    total: int
    page: int
    page_size: int = Field(..., alias="pageSize")
    page_count: int = Field(..., alias="pageCount")
    has_previous: bool = Field(..., alias="hasPrevious")
    has_next: bool = Field(..., alias="hasNext")


# ============================================
# Helpers
# ============================================

async def _read_json(request: Request) -> Any:
    """Request body as JSON; None when the body is empty or not JSON"""
    body = await request.body()
    if not body:
        return None
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning(f"Unparseable JSON body for {request.method} {request.url.path}")
        return None


def _mutation_response(result: MutationResult, success_status: int) -> JSONResponse:
    if result.success:
        return JSONResponse(status_code=success_status, content=result.to_dict())
    return JSONResponse(status_code=ERROR_STATUS[result.error_kind], content=result.to_dict())


def attachment_disposition(filename: str) -> str:
    """
    Content-Disposition for a download.

    Header values must be Latin-1, so names with other characters (or quotes,
    spaces) get an ASCII fallback plus the RFC 5987 filename* parameter.
    """
    fallback = _UNSAFE_FILENAME_CHARS.sub("_", filename)
    if fallback == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


async def _get_or_404(service: ApplicationService, application_id: str) -> Application:
    application = await service.get_application(application_id)
    if application is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found."
        )
    return application


# ============================================
# Endpoints
# ============================================

@router.get("/applications", response_model=ReportResponse)
async def list_applications(
    search: str = Query("", description="Case-insensitive filter on full name"),
    sort: Optional[str] = Query(None, description="fullName | applicationDate | amountPaid"),
    order: str = Query("asc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    service: ApplicationService = Depends(get_application_service),
):
    """
    List applications for the dashboard table.

    Without a sort column, the newest applications come first.
    """
    try:
        query = ReportQuery(
            search=search,
            sort=sort,
            descending=order == "desc",
            page=page,
            page_size=page_size,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    report = build_report(await service.list_applications(), query)
    return ReportResponse(
        rows=[ApplicationResponse.from_entity(application) for application in report.rows],
        total=report.total,
        page=report.page,
        page_size=report.page_size,
        page_count=report.page_count,
        has_previous=report.has_previous,
        has_next=report.has_next,
    )


@router.get("/applications/export.csv")
async def export_applications_csv(
    service: ApplicationService = Depends(get_application_service),
):
    """Download every application as CSV (see render_csv for the quoting limitation)"""
    content = render_csv(await service.list_applications())
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": attachment_disposition(CSV_FILENAME)},
    )


@router.get("/applications/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: str,
    service: ApplicationService = Depends(get_application_service),
):
    """Get one application by id"""
    return ApplicationResponse.from_entity(await _get_or_404(service, application_id))


@router.post("/applications")
async def create_application(
    request: Request,
    service: ApplicationService = Depends(get_application_service),
):
    """
    Submit a new application.

    Returns:
        201 with {success, application} on success;
        422 with {success: false, errors} on structural or semantic failure;
        503 when the AI validation service is unavailable
    """
    payload = await _read_json(request)
    result = await service.create_application(payload)
    if result.success:
        logger.info(f"✅ Application created: {result.application.id}")
    return _mutation_response(result, status.HTTP_201_CREATED)


@router.put("/applications/{application_id}")
async def update_application(
    application_id: str,
    request: Request,
    service: ApplicationService = Depends(get_application_service),
):
    """
    Edit an existing application. The id in the path wins over any id in the body.
    """
    payload = await _read_json(request)
    if isinstance(payload, dict):
        payload = {**payload, "id": application_id}

    result = await service.update_application(payload)
    if result.success:
        logger.info(f"✅ Application updated: {application_id}")
    return _mutation_response(result, status.HTTP_200_OK)


@router.delete("/applications/{application_id}")
async def delete_application(
    application_id: str,
    service: ApplicationService = Depends(get_application_service),
):
    """Delete an application"""
    result = await service.delete_application(application_id)
    status_code = status.HTTP_200_OK if result.success else status.HTTP_404_NOT_FOUND
    return JSONResponse(status_code=status_code, content=result.to_dict())


@router.get("/applications/{application_id}/receipt", response_class=HTMLResponse)
async def view_receipt(
    application_id: str,
    request: Request,
    service: ApplicationService = Depends(get_application_service),
    counter: ReceiptCounter = Depends(get_receipt_counter),
):
    """Printable receipt page; draws the next session-local receipt number"""
    application = await service.get_application(application_id)
    if application is None:
        return HTMLResponse(content=RECEIPT_NOT_FOUND_HTML, status_code=status.HTTP_404_NOT_FOUND)

    receipt = Receipt(number=counter.next(), application=application, generated_on=date.today())
    pdf_url = str(
        request.url_for("download_receipt_pdf", application_id=application_id)
        .include_query_params(receipt_no=receipt.number.value)
    )
    return HTMLResponse(content=render_receipt_html(receipt, pdf_url=pdf_url))


@router.get("/applications/{application_id}/receipt.pdf")
async def download_receipt_pdf(
    application_id: str,
    receipt_no: Optional[int] = Query(None, ge=1, description="Number shown on the HTML receipt"),
    service: ApplicationService = Depends(get_application_service),
    counter: ReceiptCounter = Depends(get_receipt_counter),
):
    """Receipt as a PDF download"""
    application = await _get_or_404(service, application_id)

    number = ReceiptNumber(receipt_no) if receipt_no is not None else counter.next()
    receipt = Receipt(number=number, application=application, generated_on=date.today())
    return Response(
        content=render_receipt_pdf(receipt),
        media_type="application/pdf",
        headers={"Content-Disposition": attachment_disposition(receipt.filename)},
    )
