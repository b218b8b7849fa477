#!/usr/bin/env python3
"""
Satellite Pass Report
Prints the next ISS passes over your current location.
"""

import logging
import sys

import pytz

from satellite_passes_lookup import (
    PassLookupError,
    SatellitePassLookup,
    load_config,
)

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def format_pass_time(pass_window, tz=pytz.utc):
    """Format one pass as a human readable line"""
    rise = pass_window.rise_datetime(tz)
    return f"Next pass at {rise.strftime('%a %b %d %Y %H:%M:%S %Z')} for {pass_window.duration} seconds!"


def print_passes(passes, tz=pytz.utc):
    """Print passes, one line each"""
    if not passes:
        print("No upcoming passes found for your location.")
        return

    for pass_window in passes:
        print(format_pass_time(pass_window, tz))


def main(config_path='config.ini'):
    """Main function"""
    config = load_config(config_path)
    lookup = SatellitePassLookup(config)

    try:
        passes = lookup.next_passes_for_my_location()
    except PassLookupError as e:
        logger.error(f"Pass lookup failed: {e}")
        print(f"It didn't work! {e}")
        return 1

    print(f"Times shown in {config.timezone_str}.")
    print_passes(passes, config.local_tz)
    return 0


if __name__ == "__main__":
    sys.exit(main())
