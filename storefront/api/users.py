from fastapi import APIRouter, Depends, Query
from storefront.api.deps import get_current_user, get_recently_viewed
from storefront.models.user import User
from storefront.schemas.common import MessageResponse
from storefront.schemas.product import Product
from storefront.services.recently_viewed_service import RecentlyViewedService
from typing import List

router = APIRouter()


@router.get("/recently-viewed", response_model=List[Product])
async def get_recently_viewed_products(
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    recently_viewed: RecentlyViewedService = Depends(get_recently_viewed)
):
    """Recently viewed products, most recent first"""
    products = await recently_viewed.list(current_user.id)
    return products[:limit]


@router.delete("/recently-viewed", response_model=MessageResponse)
async def clear_recently_viewed(
    current_user: User = Depends(get_current_user),
    recently_viewed: RecentlyViewedService = Depends(get_recently_viewed)
):
    await recently_viewed.clear(current_user.id)
    return MessageResponse(message="Recently viewed cleared")
