from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models.file import FileNode


class FileCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str | None = None
    type: str | None = None
    parent_id: int | str = 0
    is_public: bool = False
    data: str | None = Field(default=None, repr=False)


class FileRead(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    user_id: str
    name: str
    type: str
    is_public: bool
    parent_id: int | str
    thumbnails: list[int] = Field(default_factory=list)

    @classmethod
    def from_node(cls, node: FileNode) -> "FileRead":
        return cls(
            id=node.id,
            user_id=node.owner_id,
            name=node.name,
            type=node.kind,
            is_public=node.is_public,
            parent_id=node.parent_id or 0,
            thumbnails=sorted(node.derived_blob_refs, reverse=True),
        )
