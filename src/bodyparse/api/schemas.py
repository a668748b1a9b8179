"""Request body shapes accepted by the API."""

from pydantic import Field

from bodyparse.decoding.target import Int64, RequestBody


class Foo(RequestBody):
    """Fields accepted by handlers decoding into ``Foo``."""

    name: str = Field(default="", alias="Name")
    id: Int64 = Field(default=0, alias="ID")
