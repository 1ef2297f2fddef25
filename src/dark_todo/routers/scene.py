from __future__ import annotations

from fastapi import APIRouter, HTTPException, Path, Query, Request, status

from ..schemas import SceneOut, SphereHover
from ..views import scene_view

router = APIRouter(
    prefix="/api/v1/scene",
    tags=["scene"],
)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=SceneOut,
    summary="Get Scene",
    description=(
        "Spheres for the given viewport, advanced by one frame at `elapsed` seconds. "
        "A new viewport size regenerates the spheres."
    ),
)
def get_scene(
    request: Request,
    width: float = Query(16.0, gt=0, description="Viewport width in scene units"),
    height: float = Query(9.0, gt=0, description="Viewport height in scene units"),
    elapsed: float = Query(0.0, ge=0, description="Seconds since the scene clock started"),
) -> SceneOut:
    scene = request.app.state.scene
    scene.resize(width, height)
    scene.advance(elapsed)
    return scene_view(scene, elapsed)


# PUBLIC_INTERFACE
@router.put(
    "/spheres/{index}/hover",
    response_model=SceneOut,
    summary="Set Sphere Hover",
    description="Mark one sphere as under (or no longer under) the pointer. Hovered spheres render lighter.",
    responses={404: {"description": "No sphere at that index"}},
)
def set_hover(
    payload: SphereHover,
    request: Request,
    index: int = Path(..., ge=0, description="Sphere index in the current scene"),
) -> SceneOut:
    scene = request.app.state.scene
    if scene.hover(index, payload.hovered) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sphere not found")
    return scene_view(scene, scene.elapsed)
