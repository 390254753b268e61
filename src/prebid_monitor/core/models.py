# ABOUTME: Domain models for scan requests, page data, and per-URL outcomes
# ABOUTME: Pydantic models shared by the execution engine, persister, and pipeline

from datetime import date
from enum import Enum
from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ConcurrencyMode(str, Enum):
    """How a batch of URLs is dispatched to the page inspector."""

    SEQUENTIAL = "sequential"
    POOLED = "pooled"


class SourceKind(str, Enum):
    """Where the URL list of a run comes from."""

    LOCAL_FILE = "local_file"
    REPOSITORY = "repository"


class IntegrationInstance(BaseModel):
    """A Prebid.js instance found on a page."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    instance_name: str = Field(description="Global variable the instance is exposed under, e.g. 'pbjs'")
    version: str = Field(description="Reported Prebid.js version")
    module_names: list[str] = Field(default_factory=list, description="Installed Prebid.js modules")


class InspectionResult(BaseModel):
    """What the page inspector reports for one loaded page."""

    detected_libraries: list[str] = Field(default_factory=list)
    integration_instances: list[IntegrationInstance] = Field(default_factory=list)

    @field_validator("detected_libraries")
    @classmethod
    def _dedupe_libraries(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @property
    def has_signal(self) -> bool:
        return bool(self.detected_libraries or self.integration_instances)


class ExtractedPageData(BaseModel):
    """Ad-tech evidence for one URL, as written to the dated record store."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    url: str
    scan_date: date
    detected_libraries: list[str] = Field(default_factory=list)
    integration_instances: list[IntegrationInstance] = Field(default_factory=list)

    def to_record(self) -> dict:
        """Serialize with camelCase keys and an ISO scan date."""
        return self.model_dump(mode="json", by_alias=True)


class SuccessOutcome(BaseModel):
    """The page was visited and produced at least one signal."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    url: str
    data: ExtractedPageData


class NoSignalOutcome(BaseModel):
    """The page was visited but showed no ad-tech integration."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["no_signal"] = "no_signal"
    url: str


class FailureOutcome(BaseModel):
    """Visiting or inspecting the page raised an error."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["failure"] = "failure"
    url: str
    error_code: str
    message: str = ""


TaskOutcome = Annotated[SuccessOutcome | NoSignalOutcome | FailureOutcome, Field(discriminator="kind")]


class ScanBatch(BaseModel):
    """An immutable, ordered set of URLs dispatched together as one chunk."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(default=1, ge=1, description="1-based chunk number")
    total: int = Field(default=1, ge=1, description="Number of chunks in the run")
    urls: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.urls)


class UrlSource(BaseModel):
    """A local file path or a GitHub repository/file reference."""

    model_config = ConfigDict(frozen=True)

    kind: SourceKind
    location: str

    @property
    def is_line_file(self) -> bool:
        """True for local plain-text sources, the only kind reconciled after a run."""
        return self.kind == SourceKind.LOCAL_FILE and Path(self.location).suffix.lower() == ".txt"


class ScanRequest(BaseModel):
    """Everything one pipeline run needs, resolved from config and CLI flags."""

    source: UrlSource | None = None
    mode: ConcurrencyMode = ConcurrencyMode.POOLED
    max_parallelism: int = Field(default=5, ge=1)
    visit_timeout_ms: int = Field(default=60000, gt=0)
    output_dir: Path = Path("store")
    error_dir: Path = Path("errors")
    range_spec: str | None = None
    chunk_size: int = Field(default=0, description="URLs per chunk, zero or less runs everything as one chunk")
    max_urls: int | None = Field(default=None, ge=1, description="Ceiling for repository sourcing")


class ScanSummary(BaseModel):
    """Counts reported at the end of a run."""

    source: str | None = None
    total_urls: int = 0
    scoped_urls: int = 0
    chunks_processed: int = 0
    successes: int = 0
    no_signal: int = 0
    failures: int = 0
    records: list[ExtractedPageData] = Field(default_factory=list)
    halted_reason: str | None = None

    @property
    def completed(self) -> bool:
        return self.halted_reason is None
