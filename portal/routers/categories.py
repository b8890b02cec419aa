from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portal.core.current_user import get_principal
from portal.core.deps import get_db
from portal.core.errors import Conflict, NotFoundError
from portal.core.ids import parse_id
from portal.core.permissions import require_admin
from portal.core.principal import Principal
from portal.models.category import Category
from portal.schemas.category import CategoryCreate, CategoryRead

router = APIRouter()


@router.get("", response_model=list[CategoryRead])
def list_categories(
    db: Session = Depends(get_db),
    _: Principal = Depends(get_principal),
):
    return db.query(Category).order_by(Category.name).all()


@router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    name = payload.name.strip()
    if db.query(Category).filter(Category.name == name).first():
        raise Conflict("Category already exists")

    category = Category(name=name, description=payload.description)
    db.add(category)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Category already exists")

    db.refresh(category)
    return category


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: str,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    category = db.get(Category, parse_id(category_id, "Category"))
    if not category:
        raise NotFoundError("Category not found")
    db.delete(category)
    db.commit()
