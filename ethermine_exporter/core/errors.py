"""Exception hierarchy for the scrape pipeline.

Services raise these; one exception handler in main.py turns them into
a plain-text HTTP response.  Every error ends the request: nothing is
retried and no partial metrics are written.

  ExporterError
  ├── ClientInputError          400  bad or missing query parameter
  │   └── UnknownTargetError    400  pool id not in the catalog
  ├── UpstreamTransportError    500  network / IO failure reaching the API
  ├── UpstreamLogicalError      500  API answered, but unusably
  │   ├── MalformedPayloadError      body does not match the expected shape
  │   └── UpstreamStatusError        status field is not "OK"
  ├── UpstreamNoDataError       404  API knows the request shape, has no records
  └── AssemblyError             500  metric identity collision
"""

from __future__ import annotations


class ExporterError(Exception):
    status_code = 500
    # Label value for the scrapes_total counter.
    outcome = "error"
    default_message = "Internal error."

    def __init__(self, message: str | None = None, *, status_code: int | None = None) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def render(self) -> str:
        return f"{self.status_code} - {self.message}\n"


class ClientInputError(ExporterError):
    status_code = 400
    outcome = "client_error"
    default_message = "Bad request."


class UnknownTargetError(ClientInputError):
    default_message = "Invalid pool."

    def __init__(
        self, target_id: str, message: str | None = None, *, status_code: int | None = None
    ) -> None:
        self.target_id = target_id
        super().__init__(message, status_code=status_code)


class UpstreamTransportError(ExporterError):
    outcome = "transport_error"

    def __init__(self, cause: object) -> None:
        self.cause = cause
        super().__init__(f"Failed to scrape target: {cause}")


class UpstreamLogicalError(ExporterError):
    outcome = "upstream_error"


class MalformedPayloadError(UpstreamLogicalError):
    default_message = "Failed to parse scraped data."


class UpstreamStatusError(UpstreamLogicalError):
    default_message = "API data not OK."

    def __init__(self, status: str | None) -> None:
        self.status = status
        super().__init__()


class UpstreamNoDataError(ExporterError):
    status_code = 404
    outcome = "no_data"
    default_message = "API data not found."


class AssemblyError(ExporterError):
    outcome = "assembly_error"
    default_message = "Failed to assemble metrics."

    def __init__(self, detail: str) -> None:
        # The response body stays generic; the detail is for logs.
        self.detail = detail
        super().__init__()
