import argparse
import asyncio
import logging

from derivchain.adapters.aquarius.client import AquariusAdapter
from derivchain.adapters.config.settings_loader import load_settings
from derivchain.core.domain.report import DerivationChainRequestParameters
from derivchain.core.services.report_builder import DerivationChainReportBuilder


async def run(series_id: str, user: str, config: str | None) -> str:
    settings = load_settings(config)
    logging.basicConfig(level=settings.log_level)

    aquarius = AquariusAdapter(
        publish_url=settings.get_publish_url(),
        username=settings.aquarius_username,
        password=settings.aquarius_password,
        token=settings.aquarius_token,
        timeout=settings.request_timeout,
    )
    builder = DerivationChainReportBuilder(
        aquarius,
        aquarius,
        max_description_batch_size=settings.max_description_batch_size,
        report_title=settings.report_title,
    )
    try:
        report = await builder.build_report(
            DerivationChainRequestParameters(primary_timeseries_identifier=series_id),
            user,
        )
    finally:
        await aquarius.close()
    return report.model_dump_json(by_alias=True, indent=2)


def main():
    parser = argparse.ArgumentParser(description="Print a derivation chain report as JSON")
    parser.add_argument("series_id", help="Unique id of the primary time series")
    parser.add_argument("--user", default="cli", help="Requesting user recorded in the report")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    args = parser.parse_args()

    print(asyncio.run(run(args.series_id, args.user, args.config)))


if __name__ == "__main__":
    main()
