"""Base model shared by query configs, DDL configs and results."""

from pydantic import BaseModel, ConfigDict


class QueryCraftBaseModel(BaseModel):
    """Base model for QueryCraft configs and results.

    Enum fields store their plain values, and assignments after
    construction are validated so a copied config cannot drift into an
    invalid state.
    """
    model_config = ConfigDict(
        use_enum_values=True,
        validate_assignment=True
    )
