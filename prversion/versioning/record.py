"""Version record file: the YAML document each branch stores its version in."""

from pathlib import Path
from typing import Any, Dict, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, StrictInt
from pydantic import ValidationError as PydanticValidationError

from .exceptions import VersionFormatError, VersionValidationError
from .version import FIELD_MAX, FIELD_MIN, SemanticVersion

RECORD_FORMAT = "mapping with integer keys major, minor, patch"


class VersionRecord(BaseModel):
    """Pydantic model of a version record.

    Keys other than major/minor/patch are kept so a rewrite does not drop
    anything a human added to the file.
    """

    model_config = ConfigDict(extra="allow")

    major: StrictInt = Field(ge=FIELD_MIN, le=FIELD_MAX)
    minor: StrictInt = Field(ge=FIELD_MIN, le=FIELD_MAX)
    patch: StrictInt = Field(ge=FIELD_MIN, le=FIELD_MAX)

    @property
    def version(self) -> SemanticVersion:
        return SemanticVersion(self.major, self.minor, self.patch)

    def with_version(self, version: SemanticVersion) -> "VersionRecord":
        return self.model_copy(update=version.as_dict())

    @classmethod
    def from_version(cls, version: SemanticVersion) -> "VersionRecord":
        return cls(**version.as_dict())

    @classmethod
    def from_yaml_string(cls, content: str) -> "VersionRecord":
        """
        Parse a record from YAML text.

        Raises:
            VersionFormatError: If the text is not a YAML mapping
            VersionValidationError: If a field is missing, not an integer,
                negative or larger than 99
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise VersionFormatError(content.strip(), RECORD_FORMAT) from e

        if not isinstance(data, dict):
            raise VersionFormatError(str(content).strip(), RECORD_FORMAT)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VersionRecord":
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise VersionValidationError(f"Invalid version record: {problems}") from e

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "VersionRecord":
        with open(path, "r") as f:
            return cls.from_yaml_string(f.read())

    def to_yaml(self) -> str:
        data = self.model_dump()
        # fixed field order first, extras after
        ordered = {k: data.pop(k) for k in ("major", "minor", "patch")}
        ordered.update(data)
        return yaml.safe_dump(ordered, sort_keys=False)

    def save(self, path: Union[str, Path]) -> None:
        with open(path, "w") as f:
            f.write(self.to_yaml())
