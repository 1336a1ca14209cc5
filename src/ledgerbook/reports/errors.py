"""Report errors."""


class ReportError(Exception):
    """Base exception for report derivation failures."""

    pass


class MissingTaxIdError(ReportError):
    """The client has no registered GSTIN."""

    def __init__(self, client_id: str):
        super().__init__(
            f"Client {client_id} has no GSTIN registered. Cannot generate GST report."
        )
        self.client_id = client_id


class ReportPeriodError(ReportError):
    """The requested reporting period is invalid."""

    pass


class InvalidTaxIdError(ReportError):
    """The client's GSTIN is malformed or fails its check character."""

    def __init__(self, client_id: str, tax_id: str):
        super().__init__(f"Client {client_id} has an invalid GSTIN: {tax_id}")
        self.client_id = client_id
        self.tax_id = tax_id
