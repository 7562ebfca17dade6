#!/usr/bin/env python3
"""
Report how often a station's measurements exceed a parameter's limit.

Reads connection settings from SUPABASE_URL and SUPABASE_KEY.
"""

import argparse
import asyncio
import logging
import sys
from datetime import date, datetime
from typing import List, Optional

from aqmonitor import (
    DataSourceError,
    InvalidSelectionError,
    MeasurementAnalysisEngine,
    ReferenceData,
    ReferenceDataLoader,
    Selection,
    SupabaseClient,
)


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD") from e


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description=__doc__)
    p.add_argument("--station", help="Station identifier")
    p.add_argument("--parameter", help="Parameter identifier")
    p.add_argument("--start", type=_parse_date, help="First day (default: one year ago)")
    p.add_argument("--end", type=_parse_date, help="Last day (default: today)")
    p.add_argument("--list", action="store_true", help="List stations and parameters and exit")
    p.add_argument("--csv", help="Write the measurement series to this CSV file")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p.parse_args(argv)


def build_selection(args: argparse.Namespace) -> Selection:
    """Selection from the arguments, defaulting to the last year.

    Raises:
        InvalidSelectionError: If the station or parameter is missing.
    """
    defaults = Selection.last_year(args.station, args.parameter)
    selection = Selection(
        args.station,
        args.parameter,
        args.start or defaults.start_date,
        args.end or defaults.end_date,
    )
    return MeasurementAnalysisEngine.validate(selection)


def print_reference(reference: ReferenceData) -> None:
    print("Stations:")
    for station in reference.stations:
        print(f"  {station.station_id}: {station.name}")
    print("Parameters:")
    for parameter in reference.parameters:
        limit = "no limit" if parameter.limit is None else f"limit {parameter.limit:g}"
        print(f"  {parameter.parameter_id}: {parameter.description} ({limit})")


async def main(args: argparse.Namespace) -> int:
    # checked before any connection settings are read
    selection = None if args.list else build_selection(args)

    async with SupabaseClient() as client:
        loader = ReferenceDataLoader(
            client,
            stations_table=client.config.stations_table,
            parameters_table=client.config.parameters_table,
        )
        reference = await loader.load()

        if selection is None:
            print_reference(reference)
            return 0

        engine = MeasurementAnalysisEngine(
            client, reference, measurements_table=client.config.measurements_table
        )
        result = await engine.query(selection)

    station = reference.get_station(selection.station_id)
    print(f"Station: {station.name if station else selection.station_id}")
    print(f"Period: {selection.start_date} - {selection.end_date}")
    print(result.summary())

    if args.csv:
        result.to_pandas().to_csv(args.csv, index=False)
        print(f"Series written to {args.csv}")
    return 0


def run(args: argparse.Namespace) -> int:
    """Run the report and map failures to exit codes."""
    try:
        return asyncio.run(main(args))
    except InvalidSelectionError as e:
        print(f"Invalid selection: {e}", file=sys.stderr)
        return 2
    except DataSourceError as e:
        print(f"Data source error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n  Report interrupted by user")
        return 130


if __name__ == "__main__":
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    sys.exit(run(args))
