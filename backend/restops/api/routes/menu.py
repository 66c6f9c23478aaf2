"""Menu routes. Costs are computed live on every read."""

from typing import Optional

from fastapi import APIRouter, Request, status

from restops.core.rate_limit import limiter
from restops.db.session import DbSession
from restops.schemas.menu import MenuItemCreate, MenuItemResponse, MenuItemUpdate
from restops.services.menu_service import MenuService

router = APIRouter()


@router.get("/", response_model=list[MenuItemResponse])
@limiter.limit("60/minute")
def list_menu(request: Request, db: DbSession, category: Optional[str] = None):
    service = MenuService(db)
    return service.costed(service.list_items(category))


@router.post("/", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_menu_item(request: Request, db: DbSession, data: MenuItemCreate):
    service = MenuService(db)
    item = service.create(
        name=data.name,
        price=data.price,
        category=data.category,
        image_url=data.image_url,
        recipe=data.recipe,
    )
    return service.costed([item])[0]


@router.get("/{item_id}", response_model=MenuItemResponse)
@limiter.limit("60/minute")
def get_menu_item(request: Request, item_id: str, db: DbSession):
    service = MenuService(db)
    return service.costed([service.get(item_id)])[0]


@router.put("/{item_id}", response_model=MenuItemResponse)
@limiter.limit("30/minute")
def update_menu_item(request: Request, item_id: str, data: MenuItemUpdate, db: DbSession):
    service = MenuService(db)
    changes = data.model_dump(exclude_unset=True, exclude={"recipe"})
    item = service.update(item_id, recipe=data.recipe, **changes)
    return service.costed([item])[0]


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("30/minute")
def delete_menu_item(request: Request, item_id: str, db: DbSession):
    MenuService(db).delete(item_id)
