import re
from dataclasses import dataclass
from typing import Optional

from .errors import InvalidInputError

IDENTIFIER_PATTERN = re.compile(
    r"^(?P<owner>[^/]+)/(?P<name>[^/:]+)(:(?P<version>.+))?$"
)


@dataclass(frozen=True)
class ModelVersionIdentifier:
    """A reference to a model, ``owner/name``, or to one of its versions,
    ``owner/name:version``."""

    owner: str
    name: str
    version: Optional[str] = None

    def __str__(self):
        if self.version:
            return f"{self.owner}/{self.name}:{self.version}"
        return f"{self.owner}/{self.name}"

    @property
    def model(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, ref: str) -> "ModelVersionIdentifier":
        match = IDENTIFIER_PATTERN.match(ref)
        if not match:
            raise InvalidInputError(
                f"Invalid reference to model version: {ref}. Expected format: owner/name or owner/name:version"
            )
        return cls(
            owner=match.group("owner"),
            name=match.group("name"),
            version=match.group("version"),
        )
