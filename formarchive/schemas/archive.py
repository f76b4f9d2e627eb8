# formarchive/schemas/archive.py
from typing import Annotated, Any, Dict, List, Literal, Union

from pydantic import BaseModel, Field


class Uploaded(BaseModel):
    status: Literal["uploaded"] = "uploaded"
    key: str


class Skipped(BaseModel):
    status: Literal["skipped"] = "skipped"
    reason: Literal["missing_env"] = "missing_env"
    missing: List[str]


class Failed(BaseModel):
    status: Literal["failed"] = "failed"
    error: str
    details: Dict[str, Any] = Field(default_factory=dict)


UploadOutcome = Annotated[Union[Uploaded, Skipped, Failed], Field(discriminator="status")]


class ArchiveResponse(BaseModel):
    archived: UploadOutcome
