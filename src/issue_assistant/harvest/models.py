"""Data models for repository harvesting.

The models use Pydantic for validation, consistent with the event and
analysis models elsewhere in the package. Harvested files are frozen: they
are produced by one traversal and only read afterwards.
"""

from pydantic import BaseModel, ConfigDict, Field

from src.issue_assistant.harvest.filter import FileKind


class HarvestedFile(BaseModel):
    """A repository file accepted by the filter, with its decoded content.

    Attributes:
        path: Repository-relative, slash-separated path.
        content: Decoded text content of the file.
        kind: Informational category derived from the filename.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(
        ...,
        min_length=1,
        description="Repository-relative, slash-separated path",
    )

    content: str = Field(
        ...,
        description="Decoded text content of the file",
    )

    kind: FileKind = Field(
        default=FileKind.OTHER,
        description="Informational category derived from the filename",
    )


class HarvestFailure(BaseModel):
    """A file that could not be fetched or decoded during a harvest.

    Attributes:
        path: Repository-relative path of the failing file.
        error: Human-readable description of the failure.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    error: str


class HarvestReport(BaseModel):
    """Outcome of a harvest, including per-file failures in lenient mode.

    Attributes:
        files: Harvested files in traversal order.
        failures: Files skipped because they could not be retrieved. Always
            empty for a strict harvest, which raises instead.
    """

    files: list[HarvestedFile] = Field(default_factory=list)
    failures: list[HarvestFailure] = Field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """True when every accepted file was harvested."""
        return not self.failures
