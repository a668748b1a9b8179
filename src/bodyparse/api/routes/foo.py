"""Foo endpoints."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from bodyparse.api.schemas import Foo
from bodyparse.shared.context import get_parsed_body
from bodyparse.shared.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Foo"])


@router.post("/foo", response_class=PlainTextResponse)
async def create_foo() -> str:
    """Echo the decoded ``Foo`` back as text."""
    foo = get_parsed_body(Foo)
    logger.debug("foo_received", name=foo.name, id=foo.id)
    return foo.describe()
