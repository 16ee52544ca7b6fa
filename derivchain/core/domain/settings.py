from pydantic import BaseModel, Field


class SystemSettings(BaseModel):
    """
    Global system configuration settings.
    """
    # AQUARIUS Publish API
    aquarius_url: str = Field(default="http://localhost/AQUARIUS/Publish/v2", description="AQUARIUS Publish API base URL")
    aquarius_username: str | None = Field(default=None, description="AQUARIUS account used to open a session")
    aquarius_password: str | None = Field(default=None, description="Password for the AQUARIUS account")
    aquarius_token: str | None = Field(default=None, description="Preissued authentication token, skips session login")
    request_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")

    # Report
    max_description_batch_size: int = Field(default=30, ge=1, description="Maximum ids per time series description request")
    report_title: str = Field(default="Derivation Chain", description="Title written into report metadata")

    # Logging
    log_level: str = Field(default="INFO", description="Root logging level")

    def get_publish_url(self) -> str:
        """Get the base URL without a trailing slash."""
        return self.aquarius_url.rstrip("/")
