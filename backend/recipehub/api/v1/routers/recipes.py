# recipehub/api/v1/routers/recipes.py
from fastapi import APIRouter, Depends, HTTPException, status
from tortoise.transactions import in_transaction

from recipehub.api.v1.deps import get_current_user, get_notifier
from recipehub.models.recipe import Recipe, Review
from recipehub.models.user import User
from recipehub.realtime.notifier import Notifier
from recipehub.schemas.recipe import RecipeCreateIn, RecipeOut, RecipeUpdateIn, ReviewIn

router = APIRouter(prefix="/recipes", tags=["recipes"])

# Request field name -> model attribute
_UPDATABLE = {
    "title": "title",
    "description": "description",
    "ingredients": "ingredients",
    "instructions": "instructions",
    "isPublic": "is_public",
}


async def _recipe_out(recipe: Recipe) -> dict:
    ratings = await Review.filter(recipe_id=recipe.id).values_list("rating", flat=True)
    avg = sum(ratings) / len(ratings) if ratings else None
    return RecipeOut(
        id=recipe.id,
        authorId=recipe.author_id,
        title=recipe.title,
        description=recipe.description,
        ingredients=recipe.ingredients or [],
        instructions=recipe.instructions,
        isPublic=recipe.is_public,
        averageRating=round(avg, 2) if avg is not None else None,
        reviewCount=len(ratings),
    ).model_dump()


async def _get_recipe_or_404(recipe_id: int) -> Recipe:
    recipe = await Recipe.get_or_none(id=recipe_id)
    if not recipe:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="RECIPE_NOT_FOUND")
    return recipe


@router.post("")
async def create_recipe(
    body: RecipeCreateIn,
    user: User = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Create a recipe authored by the current user.
    Subscribers are notified only after the transaction has committed.
    """
    async with in_transaction():
        recipe = await Recipe.create(
            author=user,
            title=body.title,
            description=body.description,
            ingredients=body.ingredients,
            instructions=body.instructions,
            is_public=body.isPublic,
        )
    await notifier.notify_recipe_subscribers(recipe.id)
    return {"success": True, "data": await _recipe_out(recipe)}


@router.get("/{recipe_id}")
async def get_recipe(recipe_id: int, user: User = Depends(get_current_user)):
    """
    Get a recipe with its average rating.

    Private recipes are visible to their author only.

    Raises:
        HTTPException (404): RECIPE_NOT_FOUND
    """
    recipe = await _get_recipe_or_404(recipe_id)
    if not recipe.is_public and recipe.author_id != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="RECIPE_NOT_FOUND")
    return {"success": True, "data": await _recipe_out(recipe)}


@router.patch("/{recipe_id}")
async def update_recipe(
    recipe_id: int,
    body: RecipeUpdateIn,
    user: User = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Partially update a recipe. Only its author may edit it.

    After the change is committed, every connection subscribed to the recipe
    receives {"type": "recipe_update", "recipeId": <id>}.

    Raises:
        HTTPException (404): RECIPE_NOT_FOUND
        HTTPException (403): FORBIDDEN_NOT_AUTHOR
    """
    changes = body.model_dump(exclude_unset=True)
    async with in_transaction():
        recipe = await _get_recipe_or_404(recipe_id)
        if recipe.author_id != user.id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="FORBIDDEN_NOT_AUTHOR")
        for field, attr in _UPDATABLE.items():
            if field in changes and changes[field] is not None:
                setattr(recipe, attr, changes[field])
        await recipe.save()
    await notifier.notify_recipe_subscribers(recipe.id)
    return {"success": True, "data": await _recipe_out(recipe)}


@router.post("/{recipe_id}/reviews")
async def add_review(
    recipe_id: int,
    body: ReviewIn,
    user: User = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Rate a recipe (1-5) with an optional comment, then notify its subscribers.

    Raises:
        HTTPException (404): RECIPE_NOT_FOUND
    """
    async with in_transaction():
        recipe = await _get_recipe_or_404(recipe_id)
        review = await Review.create(recipe=recipe, user=user, rating=body.rating, comment=body.comment)
    await notifier.notify_recipe_subscribers(recipe.id)
    return {"success": True, "data": {
        "id": review.id,
        "recipeId": recipe.id,
        "rating": review.rating,
        "comment": review.comment,
        "recipe": await _recipe_out(recipe),
    }}
