"""
CLI wrapper for assemble_chart() + generate_reading_context().

Usage:
    python -m xuanshu.run --name NAME --birth-date YYYY-MM-DD --birth-time HH:MM \
        --gender GENDER [--longitude LON | --city CITY] [--latitude LAT] \
        [--true-solar-time] [--year YEAR]
"""

import argparse
import json
import logging
import sys

from xuanshu.chart import UserProfile, assemble_chart
from xuanshu.context import generate_reading_context
from xuanshu.errors import InvalidBirthData
from xuanshu.settings import get_settings

logger = logging.getLogger(__name__)

EXIT_INVALID_INPUT = 2


def main(argv=None):
    parser = argparse.ArgumentParser(description="Compute a BaZi chart and print its reading context.")
    parser.add_argument("--name", default="")
    parser.add_argument("--birth-date", required=True, dest="birth_date")
    parser.add_argument("--birth-time", required=True, dest="birth_time")
    parser.add_argument("--gender", required=True, choices=["male", "female"])
    location = parser.add_mutually_exclusive_group()
    location.add_argument("--longitude", type=float, default=None)
    location.add_argument("--city", default=None)
    parser.add_argument("--latitude", type=float, default=None)
    parser.add_argument("--true-solar-time", dest="true_solar_time", action="store_true")
    parser.add_argument("--year", type=int, default=None)

    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(level=settings.log_level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    profile = UserProfile(
        name=args.name,
        gender=args.gender,
        birth_date=args.birth_date,
        birth_time=args.birth_time,
        longitude=args.longitude,
        latitude=args.latitude,
        use_true_solar_time=args.true_solar_time,
        city=args.city,
    )

    try:
        chart = assemble_chart(profile, settings)
    except InvalidBirthData as e:
        logger.error("Invalid birth data: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    context = generate_reading_context(chart, args.year)
    print(json.dumps(context, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
