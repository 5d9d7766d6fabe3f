"""
Project API endpoints.

Public: list, detail, search. Protected (bearer token): mine, create, update,
delete. For protected writes the guard order is body validation -> auth ->
ownership check (in the service) -> write.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from auth import dependencies as auth_dependencies
from auth.security import Identity
from core.validation import validated_body

from . import schemas, service

router = APIRouter(prefix="/projects")


@router.get("")
async def list_projects() -> dict:
    projects = await service.list_projects()
    return {"success": True, "projects": projects}


@router.get("/search/query")
async def search_projects(
    title: str | None = Query(default=None),
    start_date: str | None = Query(default=None, alias="startDate"),
) -> dict:
    projects = await service.search_projects(title=title, start_date=start_date)
    return {"success": True, "projects": projects}


@router.get("/mine/list")
async def my_projects(
    current_user: Identity = Depends(auth_dependencies.get_current_user),
) -> dict:
    projects = await service.my_projects(current_user)
    return {"success": True, "projects": projects}


@router.get("/{project_id}")
async def get_project(project_id: int) -> dict:
    project = await service.get_project(project_id)
    return {"success": True, "project": project}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: schemas.ProjectRequest = Depends(validated_body(schemas.ProjectRequest)),
    current_user: Identity = Depends(auth_dependencies.get_current_user),
) -> dict:
    project = await service.create_project(payload, owner=current_user)
    return {"success": True, "message": "Project created successfully.", "project": project}


@router.put("/{project_id}")
async def update_project(
    project_id: int,
    payload: schemas.ProjectRequest = Depends(validated_body(schemas.ProjectRequest)),
    current_user: Identity = Depends(auth_dependencies.get_current_user),
) -> dict:
    project = await service.update_project(project_id, payload, caller=current_user)
    return {"success": True, "message": "Project updated successfully.", "project": project}


@router.delete("/{project_id}")
async def delete_project(
    project_id: int,
    current_user: Identity = Depends(auth_dependencies.get_current_user),
) -> dict:
    await service.delete_project(project_id, caller=current_user)
    return {"success": True, "message": "Project deleted successfully."}
