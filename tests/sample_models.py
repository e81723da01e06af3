"""Models declared with the default factory, used by the CLI tests."""

from __future__ import annotations

from typing import Annotated, Literal

from modelmeta import Attr, BaseModel, model


@model(class_name="Library", collection_name="libraries")
class Library(BaseModel):
    """A lending library."""

    name: Annotated[str, Attr(required=True)] = ""
    city: Annotated[str, Attr()] = ""


@model(class_name="Shelf", collection_name="shelves")
class Shelf(BaseModel):
    """A shelf inside a library."""

    library: Annotated[Library, Attr()] = None
    genre: Annotated[Literal["fiction", "science"], Attr()] = "fiction"
    books: Annotated[list[str], Attr()] = []
