from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Project(BaseModel):
    """Project - groups tasks together. Owned by exactly one user."""

    # Older store revisions key entities by "_id" and the owner by "user"
    id: str = Field(
        validation_alias=AliasChoices("id", "_id"),
        serialization_alias="id",
    )
    name: str
    owner_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("ownerId", "owner_id", "user"),
        serialization_alias="ownerId",
    )

    model_config = ConfigDict(populate_by_name=True)
