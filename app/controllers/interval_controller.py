"""
Controller: Interval records — listing, export, mutations, alerts.
Thin HTTP layer — delegates ALL logic to IntervalService / ReportService.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from starlette.responses import Response

from app.core.dependencies import get_interval_service, get_report_service
from app.core.exceptions import NotFoundError, ValidationError
from app.schemas import IntervalCreate, IntervalUpdate
from app.services.interval_service import IntervalService
from app.services.report_service import ReportService

router = APIRouter(prefix="/api", tags=["Registros"])


@router.get("/registros")
def list_registros(
    user_id: Optional[str] = Query(default=None, alias="userId"),
    status: Optional[str] = None,
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    service: IntervalService = Depends(get_interval_service),
):
    try:
        registros, total = service.list_intervals(user_id, status, start_date, end_date)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return {"success": True, "registros": registros, "totalDuration": total}


@router.post("/registros", status_code=201)
def append_registro(body: IntervalCreate,
                    service: IntervalService = Depends(get_interval_service)):
    ponto = service.append_interval(
        body.user_id, body.username, body.batalhao_id, body.entrada, body.saida,
    )
    return {"success": True, "ponto": ponto}


@router.get("/registros/export")
def export_registros(
    fmt: Optional[str] = Query(default=None, alias="format"),
    user_id: Optional[str] = Query(default=None, alias="userId"),
    status: Optional[str] = None,
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    service: ReportService = Depends(get_report_service),
):
    try:
        export = service.export(fmt, user_id, status, start_date, end_date)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


@router.put("/registros/{ponto_id}")
def update_registro(ponto_id: str, body: Optional[IntervalUpdate] = None,
                    service: IntervalService = Depends(get_interval_service)):
    body = body or IntervalUpdate()
    try:
        service.update_interval(ponto_id, body.entrada, body.saida)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return {"success": True, "message": "Registro atualizado com sucesso!"}


@router.delete("/registros/{ponto_id}")
def delete_registro(ponto_id: str,
                    service: IntervalService = Depends(get_interval_service)):
    try:
        service.delete_interval(ponto_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return {"success": True, "message": "Registro excluído com sucesso!"}


@router.get("/unique-users")
def unique_users(service: IntervalService = Depends(get_interval_service)):
    return {"success": True, "users": service.unique_users()}


@router.get("/alerts")
def alerts(service: IntervalService = Depends(get_interval_service)):
    """Intervals left open for longer than the alert threshold."""
    return {"success": True, "alerts": service.alerts()}
