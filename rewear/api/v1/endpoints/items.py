"""
Item endpoints - browse, detail, create (multipart with images), edit, delete, like.
Thin controller; ItemService holds the business rules.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from rewear.core.dependencies import AdminUser, CurrentUser, ItemPage, OptionalUser
from rewear.core.enums import Category, Condition, Size
from rewear.db.repositories.item_repository import ItemFilters
from rewear.media.media_host import MediaHost, get_media_host
from rewear.schemas.common import MessageResponse, Page, Pagination
from rewear.schemas.item import ItemCreate, ItemResponse, ItemUpdate, LikeResponse
from rewear.services.factories import ItemSvc
from rewear.services.item_service import item_response

router = APIRouter()


def _page(items, page, total) -> Page[ItemResponse]:
    return Page(
        items=[item_response(i) for i in items],
        pagination=Pagination.build(page=page.page, limit=page.limit, total=total),
    )


def item_form(
    title: str = Form(...),
    description: str = Form(...),
    category: str = Form(...),
    size: str = Form(...),
    condition: str = Form(...),
    points_required: str = Form(...),
    brand: str | None = Form(None),
    color: str | None = Form(None),
    material: str | None = Form(None),
    tags: str | None = Form(None),
    swap_type: str | None = Form(None),
    primary_image_index: str | None = Form(None),
) -> ItemCreate:
    """Multipart fields validated with the same model as JSON bodies (400 on failure)."""
    raw = {
        "title": title,
        "description": description,
        "category": category,
        "size": size,
        "condition": condition,
        "points_required": points_required,
        "brand": brand or None,
        "color": color or None,
        "material": material or None,
        "tags": tags,
    }
    if swap_type:
        raw["swap_type"] = swap_type
    if primary_image_index:
        raw["primary_image_index"] = primary_image_index
    try:
        return ItemCreate.model_validate(raw)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from e


@router.get("", response_model=Page[ItemResponse])
async def list_items(
    svc: ItemSvc,
    page: ItemPage,
    category: Category | None = None,
    size: Size | None = None,
    condition: Condition | None = None,
    min_points: int | None = Query(None, ge=0),
    max_points: int | None = Query(None, ge=0),
    search: str | None = Query(None, max_length=100),
    tag: str | None = Query(None, max_length=20),
):
    """Approved, available items. REST: GET /items?page=1&limit=12&category=Tops."""
    filters = ItemFilters(
        category=category.value if category else None,
        size=size.value if size else None,
        condition=condition.value if condition else None,
        min_points=min_points,
        max_points=max_points,
        search=search.strip() if search else None,
        tag=tag,
    )
    items, total = await svc.browse(filters, skip=page.skip, limit=page.limit)
    return _page(items, page, total)


@router.get("/featured", response_model=list[ItemResponse])
async def featured_items(svc: ItemSvc, limit: int = Query(8, ge=1, le=20)):
    return [item_response(i) for i in await svc.featured(limit)]


@router.get("/all", response_model=list[ItemResponse])
async def all_items(admin: AdminUser, svc: ItemSvc):
    """Every item regardless of status (admin)."""
    return [item_response(i) for i in await svc.all_items()]


@router.get("/user/{user_id}", response_model=Page[ItemResponse])
async def user_items(user_id: int, svc: ItemSvc, page: ItemPage):
    items, total = await svc.listed_by_user(user_id, skip=page.skip, limit=page.limit)
    return _page(items, page, total)


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(item_id: int, svc: ItemSvc, viewer: OptionalUser):
    """Item detail; counts a view."""
    return item_response(await svc.view(item_id, viewer))


@router.post("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(
    user: CurrentUser,
    svc: ItemSvc,
    data: Annotated[ItemCreate, Depends(item_form)],
    media: Annotated[MediaHost, Depends(get_media_host)],
    images: list[UploadFile] | None = File(None),
):
    """Create a listing pending approval; images are proxied to the media host."""
    item = await svc.create(user, data, images or [], media)
    return item_response(item)


@router.put("/{item_id}", response_model=ItemResponse)
async def update_item(item_id: int, data: ItemUpdate, user: CurrentUser, svc: ItemSvc):
    """Owner edit; the item goes back to moderation."""
    return item_response(await svc.update(item_id, user, data))


@router.delete("/{item_id}", response_model=MessageResponse)
async def delete_item(item_id: int, user: CurrentUser, svc: ItemSvc):
    await svc.delete(item_id, user)
    return MessageResponse(message="Item deleted successfully")


@router.post("/{item_id}/like", response_model=LikeResponse)
async def toggle_like(item_id: int, user: CurrentUser, svc: ItemSvc):
    return await svc.toggle_like(item_id, user)
