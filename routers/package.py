import uuid
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from database.connection import get_db
from core.exceptions import ValidationError
from core.response import success_response, list_response
from models.package import Package, PackageStatus
from repositories.package_repository import PackageRepository, clamp_pagination
from schemas.package import PackageCreate, PackageStatusUpdate, PackageResponse
from services.package_service import PackageService

logger = logging.getLogger(__name__)
router = APIRouter()


def get_package_repository(db: Session = Depends(get_db)) -> PackageRepository:
    return PackageRepository(db)


def get_package_service(repository: PackageRepository = Depends(get_package_repository)) -> PackageService:
    return PackageService(repository)


def _validate_package_id(package_id: str) -> str:
    try:
        return str(uuid.UUID(package_id))
    except ValueError:
        raise ValidationError("Invalid package ID", field="id")


def _serialize(package: Package) -> dict:
    return PackageResponse.model_validate(package).model_dump(mode="json")


@router.post("", status_code=status.HTTP_201_CREATED)
def create_package(
    package_data: PackageCreate,
    service: PackageService = Depends(get_package_service)
):
    """Add a package to the pickup queue."""
    package = service.create(package_data.order_reference, package_data.driver_code)
    return success_response(data=_serialize(package), message="Package created successfully")


@router.get("")
def list_packages(
    limit: Optional[int] = Query(None, description="Page size, clamped to 1..100 (default 50)"),
    offset: Optional[int] = Query(None, description="Rows to skip, clamped to >= 0"),
    status_filter: Optional[str] = Query(None, alias="status", description="Only packages in this status"),
    service: PackageService = Depends(get_package_service)
):
    """List packages newest first."""
    limit, offset = clamp_pagination(limit, offset)

    package_status = None
    if status_filter:
        try:
            package_status = PackageStatus(status_filter.upper())
        except ValueError:
            logger.warning(f"Ignoring unknown status filter: {status_filter}")

    packages = service.list(limit=limit, offset=offset, status=package_status)
    return list_response([_serialize(package) for package in packages], limit=limit, offset=offset)


@router.get("/stats")
def get_package_stats(service: PackageService = Depends(get_package_service)):
    """Package counts per status."""
    return success_response(data=service.stats().model_dump(), message="Statistics retrieved successfully")


@router.get("/order/{order_ref}")
def get_package_by_order_ref(order_ref: str, service: PackageService = Depends(get_package_service)):
    return success_response(data=_serialize(service.get_by_order_ref(order_ref)))


@router.get("/{package_id}")
def get_package(package_id: str, service: PackageService = Depends(get_package_service)):
    package = service.get_by_id(_validate_package_id(package_id))
    return success_response(data=_serialize(package))


@router.patch("/{package_id}/status")
def update_package_status(
    package_id: str,
    status_data: PackageStatusUpdate,
    service: PackageService = Depends(get_package_service)
):
    """Move a package along its lifecycle."""
    package = service.update_status(_validate_package_id(package_id), status_data.status)
    return success_response(data=_serialize(package), message="Package status updated successfully")


@router.delete("/{package_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_package(package_id: str, service: PackageService = Depends(get_package_service)):
    service.delete(_validate_package_id(package_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
