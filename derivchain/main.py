import logging

from fastapi import FastAPI, Header, Query
from fastapi.responses import JSONResponse

from derivchain.adapters.aquarius.client import AquariusAdapter
from derivchain.adapters.config.settings_loader import load_settings
from derivchain.core.domain.report import (
    DerivationChainReport,
    DerivationChainRequestParameters,
)
from derivchain.core.exceptions import RetrievalFailure
from derivchain.core.services.report_builder import DerivationChainReportBuilder

VERSION = "0.1.0"

# Configuration (Load from YAML with Env Overrides)
settings = load_settings()

# Logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

# FastAPI Application
app = FastAPI(title="Derivation Chain")


@app.exception_handler(RetrievalFailure)
async def retrieval_failure_handler(request, exc: RetrievalFailure):
    logger.error(f"Report request failed: {exc}")
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.get("/health")
def health_check():
    return {"status": "ok", "version": VERSION}


def build_adapter() -> AquariusAdapter:
    return AquariusAdapter(
        publish_url=settings.get_publish_url(),
        username=settings.aquarius_username,
        password=settings.aquarius_password,
        token=settings.aquarius_token,
        timeout=settings.request_timeout,
    )


@app.get("/reports/derivationchain", response_model_by_alias=True)
async def derivation_chain_report(
    primary_timeseries_identifier: str = Query(alias="primaryTimeseriesIdentifier"),
    requesting_user: str = Header(default="anonymous", alias="X-Requesting-User"),
) -> DerivationChainReport:
    """
    Build the derivation chain report for a primary time series.
    """
    aquarius = build_adapter()
    builder = DerivationChainReportBuilder(
        processor_source=aquarius,
        metadata_source=aquarius,
        max_description_batch_size=settings.max_description_batch_size,
        report_title=settings.report_title,
    )
    try:
        return await builder.build_report(
            DerivationChainRequestParameters(
                primary_timeseries_identifier=primary_timeseries_identifier,
            ),
            requesting_user,
        )
    finally:
        await aquarius.close()
