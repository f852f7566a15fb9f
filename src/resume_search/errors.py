"""Error taxonomy for the search pipeline.

Every collaborator failure is raised as one of these at the adapter boundary
and caught by the pipeline stage that made the call, which substitutes its
safe default. Only ``InvalidRequest`` reaches a caller.
"""


class SearchError(Exception):
    """Base class for pipeline errors."""


class AnalysisDegraded(SearchError):
    """Pattern history or generative rewrite unavailable during analysis."""


class EmbeddingUnavailable(SearchError):
    """The embedding provider failed or returned an unusable response."""


class IndexUnavailable(SearchError):
    """The vector index query failed or timed out."""


class GenerationUnavailable(SearchError):
    """The generation provider is offline or returned nothing."""


class PersistenceWriteFailed(SearchError):
    """A background learning write exhausted its retries."""

    def __init__(self, job: str, attempts: int) -> None:
        """Record which job failed and after how many attempts."""
        super().__init__(f"Learning write '{job}' failed after {attempts} attempt(s)")
        self.job = job
        self.attempts = attempts


class InvalidRequest(SearchError):
    """Missing or malformed request fields."""
