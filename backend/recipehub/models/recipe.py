# recipehub/models/recipe.py
"""
Database models for recipes and their reviews.
Only the fields the HTTP layer needs to create, edit and rate a recipe.
"""
from tortoise import fields, models


class Recipe(models.Model):
    """
    Recipe database model.

    Relationships:
    - Belongs to a User (the author)
    - Has many Reviews (via related_name="reviews")
    """
    id = fields.IntField(pk=True)  # Also the realtime topic key (canonicalized to a string)
    author = fields.ForeignKeyField("models.User", related_name="recipes", on_delete=fields.CASCADE)
    title = fields.CharField(max_length=200)
    description = fields.TextField(null=True)
    ingredients = fields.JSONField(default=list)
    instructions = fields.TextField(null=True)
    is_public = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "recipes"


class Review(models.Model):
    """A 1-5 star rating with an optional comment."""
    id = fields.IntField(pk=True)
    recipe = fields.ForeignKeyField("models.Recipe", related_name="reviews", on_delete=fields.CASCADE)
    user = fields.ForeignKeyField("models.User", related_name="reviews", on_delete=fields.CASCADE)
    rating = fields.SmallIntField()
    comment = fields.TextField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "reviews"
