"""/api/invoices: invoice lifecycle endpoints."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel

from api.base import success_response
from api.errors import error_json
from core.models import (
    Invoice,
    InvoiceCreate,
    InvoiceStatus,
    InvoiceUpdate,
    PartialStornoChange,
    RepetitiveData,
    StatusChange,
    StornoChange,
)
from core.results import OperationResult
from core.services.invoice_service import InvoiceService


class SetStatusRequest(BaseModel):
    """Optional body of the status endpoint. storno_items selects items for a partial storno."""

    storno_items: list[str] | None = None


def status_change_for(status: int, body: SetStatusRequest | None) -> StatusChange | None:
    """Typed side data for a requested status, decided here and nowhere deeper."""
    if status == InvoiceStatus.STORNO:
        return StornoChange()
    if status == InvoiceStatus.PARTIAL_STORNO:
        items = body.storno_items if body and body.storno_items else []
        return PartialStornoChange(item_ids=frozenset(items))
    return None


def _serialize(data):
    if isinstance(data, Invoice):
        return data.to_details()
    if isinstance(data, list):
        return [_serialize(d) for d in data]
    return data


def _respond(result: OperationResult):
    if not result.success:
        return error_json(result.error_code, result.message, result.errors)
    return success_response(_serialize(result.data), result.message).model_dump(mode="json")


def create_invoices_router(invoice_svc: InvoiceService) -> APIRouter:
    router = APIRouter()

    # -------------------------------------------------------------------------
    # Reads (static paths registered before /invoices/{invoice_id})
    # -------------------------------------------------------------------------

    @router.get("/invoices")
    async def list_invoices(
        request: Request,
        only_mine: bool = Query(False),
        start: date | None = Query(None),
        end: date | None = Query(None),
    ):
        ctx = request.state.context
        invoices = invoice_svc.list_invoices(
            created_by=ctx.user_id if only_mine else None,
            company_id=ctx.company_id,
            start=start,
            end=end,
        )
        return success_response(_serialize(invoices)).model_dump(mode="json")

    @router.get("/invoices/statuses")
    async def statuses(request: Request):
        data = [{"value": value, "name": name} for value, name in invoice_svc.list_statuses()]
        return success_response(data).model_dump(mode="json")

    @router.get("/invoices/next-number/{client_id}")
    async def next_number(request: Request, client_id: UUID):
        return success_response({"number": invoice_svc.next_number(client_id)}).model_dump(mode="json")

    @router.get("/invoices/for-clients/{client_ids}")
    async def for_clients(request: Request, client_ids: str):
        ids = [UUID(c) for c in client_ids.split(",") if c.strip()]
        return success_response(_serialize(invoice_svc.list_for_clients(ids))).model_dump(mode="json")

    @router.get("/invoices/{invoice_id}")
    async def get_invoice(request: Request, invoice_id: UUID):
        invoice = invoice_svc.get_by_id(invoice_id)
        if invoice is None:
            return _respond(OperationResult.failed("NOT_FOUND", "Invoice not found"))
        return success_response(invoice.to_details()).model_dump(mode="json")

    @router.get("/invoices/{invoice_id}/logs")
    async def logs(request: Request, invoice_id: UUID, count: int = Query(10, ge=1, le=100)):
        entries = invoice_svc.get_logs(invoice_id, count)
        return success_response(entries).model_dump(mode="json")

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    @router.post("/invoices")
    async def create_invoice(request: Request, body: InvoiceCreate):
        return _respond(invoice_svc.create_invoice(body))

    @router.put("/invoices/{invoice_id}")
    async def update_invoice(request: Request, invoice_id: UUID, body: InvoiceUpdate):
        return _respond(invoice_svc.update_invoice(invoice_id, body))

    @router.post("/invoices/{invoice_id}/activate")
    async def activate(request: Request, invoice_id: UUID):
        return _respond(invoice_svc.activate_invoice(invoice_id))

    @router.post("/invoices/{invoice_id}/repetitive-data")
    async def repetitive_data(request: Request, invoice_id: UUID, body: RepetitiveData):
        return _respond(invoice_svc.save_repetitive_data(invoice_id, body))

    @router.post("/invoices/{invoice_id}/status/{status}")
    async def set_status(request: Request, invoice_id: UUID, status: int, body: SetStatusRequest | None = None):
        return _respond(invoice_svc.set_status(invoice_id, status, status_change_for(status, body)))

    @router.delete("/invoices/{invoice_id}")
    async def delete_invoice(request: Request, invoice_id: UUID):
        return _respond(invoice_svc.delete_invoice(invoice_id))

    return router
