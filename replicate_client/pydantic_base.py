"""
NOTE:
The job models are written against the pydantic v1 API. To avoid pinning our users to
either major version we import the v1 API from pydantic v2 when it is available and
fall back to the top level package on pydantic v1 installs.
"""
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    # Backwards compatibility is even uglier with mypy
    from pydantic.v1 import BaseModel, Field
else:
    try:
        # NOTE: we always use the pydantic v1 API, see the module docstring
        from pydantic.v1 import (  # pylint: disable=no-name-in-module
            BaseModel,
            Field,
        )
    except ImportError:
        from pydantic import BaseModel, Field


class ImmutableModel(BaseModel):  # pylint: disable=used-before-assignment
    class Config:
        allow_mutation = False


class DictCompatibleImmutableModel(ImmutableModel):
    """Immutable model that also allows ``model["key"]`` access, so API payloads
    can be read the same way whether they are parsed or plain dicts."""

    def __getitem__(self, key):
        return getattr(self, key)
