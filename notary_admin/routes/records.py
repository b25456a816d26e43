# notary_admin/routes/records.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from notary_admin.crud.records import RESOURCES, RecordRepository, Resource, with_notary_time
from notary_admin.dependencies import get_gateway, require_admin


def build_router(resource: Resource) -> APIRouter:
    """
    Routes CRUD d'une ressource : liste filtrée et paginée, détail,
    création, modification partielle, suppression.
    """
    router = APIRouter(dependencies=[Depends(require_admin)])

    def get_repository(gateway=Depends(get_gateway)) -> RecordRepository:
        return RecordRepository(gateway, resource)

    @router.get("/", response_model=Dict[str, Any])
    def list_records(
        search: Optional[str] = Query(None),
        status: Optional[str] = Query("all"),
        period: str = Query("all"),
        page: int = Query(1, ge=1),
        per_page: int = Query(10, ge=1, le=100),
        repository: RecordRepository = Depends(get_repository),
    ):
        return repository.list(search=search, status=status, period=period, page=page, per_page=per_page).model_dump()

    @router.get("/{record_id}", response_model=Dict[str, Any])
    def get_record(
        record_id: str,
        notary_timezone: Optional[str] = Query(None),
        repository: RecordRepository = Depends(get_repository),
    ):
        row = repository.get(record_id)
        if resource.name == "submissions" and notary_timezone:
            return with_notary_time(row, notary_timezone)
        return row

    @router.post("/", response_model=Dict[str, Any])
    def create_record(
        data: Dict[str, Any] = Body(...),
        repository: RecordRepository = Depends(get_repository),
    ):
        return repository.create(data)

    @router.put("/{record_id}", response_model=Dict[str, Any])
    def update_record(
        record_id: str,
        data: Dict[str, Any] = Body(...),
        repository: RecordRepository = Depends(get_repository),
    ):
        return repository.update(record_id, data)

    @router.delete("/{record_id}", response_model=Dict[str, bool])
    def delete_record(
        record_id: str,
        repository: RecordRepository = Depends(get_repository),
    ):
        repository.get(record_id)
        repository.delete(record_id)
        return {"deleted": True}

    return router


routers = {name: build_router(resource) for name, resource in RESOURCES.items()}
