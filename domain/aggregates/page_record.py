from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field

from domain.exceptions import ValidationError
from domain.value_objects.chemical_structure import ChemicalStructure  # noqa: TC001
from domain.value_objects.page_content import PageContent, figure_id
from domain.value_objects.page_status import PageStatus
from domain.value_objects.raster_image import RasterImage  # noqa: TC001

CHEMISTRY_PENDING = "pending"


class PageRecord(BaseModel):
    """The state of one rasterized page.

    Records are immutable. Every command returns a new record that replaces the
    previous one as a whole, so callers must always apply a command to the latest
    record held by the session rather than to a snapshot captured earlier.

    Page-level status and the figure-level chemistry workflow are independent:
    chemistry runs on figures of a ``done`` page and is tracked per figure id in
    ``chemistry_results`` plus the outstanding request table behind
    ``chemistry_busy``.
    """

    model_config = ConfigDict(frozen=True)

    page_number: int = Field(..., ge=1, description="1-based page number, defines order")
    image: RasterImage = Field(..., repr=False)
    status: PageStatus = PageStatus.IDLE
    content: PageContent | None = None
    chemistry_results: dict[str, str] = Field(
        default_factory=dict,
        description="Figure id -> 'pending' or resolved SMILES; absent means not requested",
    )
    chemistry_structures: dict[str, ChemicalStructure] = Field(
        default_factory=dict,
        description="Figure id -> full resolved structure for resolved entries",
    )
    chemistry_requests: dict[str, int] = Field(
        default_factory=dict,
        description="Figure id -> token of the latest outstanding chemistry request",
    )
    revision: int = Field(default=0, ge=0, description="Bumped every time processing starts")
    error_message: str | None = None

    @classmethod
    def create(cls, page_number: int, image: RasterImage) -> PageRecord:
        """Create a new idle page record (Factory Method)."""
        return cls(page_number=page_number, image=image)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def chemistry_busy(self) -> bool:
        """True while at least one chemistry request for this page is outstanding."""
        return bool(self.chemistry_requests)

    # ============================================================================
    # PAGE-LEVEL TRANSITIONS
    # ============================================================================

    def start_processing(self) -> PageRecord:
        """Enter ``processing`` and invalidate everything derived from prior content.

        Allowed from idle, error (retry) and done (re-trigger).
        """
        if self.status is PageStatus.PROCESSING:
            msg = f"Page {self.page_number} is already being processed"
            raise ValidationError(msg)
        return self.model_copy(
            update={
                "status": PageStatus.PROCESSING,
                "content": None,
                "chemistry_results": {},
                "chemistry_structures": {},
                "chemistry_requests": {},
                "revision": self.revision + 1,
                "error_message": None,
            },
        )

    def is_current_processing(self, revision: int) -> bool:
        return self.status is PageStatus.PROCESSING and self.revision == revision

    def complete_processing(self, revision: int, content: PageContent) -> PageRecord:
        """Store extracted content. Results for a superseded revision are ignored."""
        if not self.is_current_processing(revision):
            return self
        return self.model_copy(
            update={
                "status": PageStatus.DONE,
                "content": content,
                "chemistry_results": {},
                "chemistry_structures": {},
                "chemistry_requests": {},
            },
        )

    def fail_processing(self, revision: int, message: str) -> PageRecord:
        if not self.is_current_processing(revision):
            return self
        return self.model_copy(
            update={"status": PageStatus.ERROR, "content": None, "error_message": message},
        )

    # ============================================================================
    # FIGURE-LEVEL CHEMISTRY TRANSITIONS
    # ============================================================================

    def request_chemistry(self, figure_index: int, token: int) -> PageRecord:
        """Phase 1 of the chemistry workflow: optimistic placeholder write.

        Marks the figure pending (unless it already is) and registers ``token`` as
        the latest request for it, which makes ``chemistry_busy`` true.
        """
        if self.status is not PageStatus.DONE or self.content is None:
            msg = f"Page {self.page_number} has no extracted figures (status={self.status.value})"
            raise ValidationError(msg)
        try:
            box = self.content.figure(figure_index)
        except IndexError as e:
            raise ValidationError(str(e)) from e
        box.ensure_well_formed()

        fid = figure_id(figure_index)
        results = dict(self.chemistry_results)
        if results.get(fid) != CHEMISTRY_PENDING:
            results[fid] = CHEMISTRY_PENDING
        structures = {k: v for k, v in self.chemistry_structures.items() if k != fid}
        return self.model_copy(
            update={
                "chemistry_results": results,
                "chemistry_structures": structures,
                "chemistry_requests": {**self.chemistry_requests, fid: token},
            },
        )

    def owns_chemistry_request(self, fid: str, token: int, revision: int) -> bool:
        """True if ``token`` is still the latest request for ``fid`` on this revision."""
        return self.revision == revision and self.chemistry_requests.get(fid) == token

    def resolve_chemistry(
        self,
        fid: str,
        token: int,
        revision: int,
        structure: ChemicalStructure,
    ) -> PageRecord:
        """Phase 2: merge a resolved structure. Stale or orphaned responses are ignored."""
        if not self.owns_chemistry_request(fid, token, revision):
            return self
        requests = {k: v for k, v in self.chemistry_requests.items() if k != fid}
        return self.model_copy(
            update={
                "chemistry_results": {**self.chemistry_results, fid: structure.smiles},
                "chemistry_structures": {**self.chemistry_structures, fid: structure},
                "chemistry_requests": requests,
            },
        )

    def fail_chemistry(self, fid: str, token: int, revision: int) -> PageRecord:
        """Drop the figure entry so it can be requested again."""
        if not self.owns_chemistry_request(fid, token, revision):
            return self
        return self.model_copy(
            update={
                "chemistry_results": {
                    k: v for k, v in self.chemistry_results.items() if k != fid
                },
                "chemistry_structures": {
                    k: v for k, v in self.chemistry_structures.items() if k != fid
                },
                "chemistry_requests": {
                    k: v for k, v in self.chemistry_requests.items() if k != fid
                },
            },
        )
