#!/usr/bin/env python3
"""
Satellite Pass Lookup
Finds the next ISS passes over your current location.

Chains three web lookups: public IP -> coordinates -> fly-over times.
The first failure stops the chain and is raised to the caller.
"""

import configparser
from collections import namedtuple
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
import logging

import pytz
import requests

logger = logging.getLogger(__name__)

DEFAULT_IP_URL = 'https://api.ipify.org?format=json'
DEFAULT_GEO_URL = 'http://ipwho.is/{ip}'
DEFAULT_FLYOVER_URL = 'https://iss-flyover.herokuapp.com/json/'
DEFAULT_TIMEOUT = 30

# Literal body returned by the fly-over service for bad lat/lon
INVALID_COORDINATES_BODY = 'invalid coordinates'


class PassLookupError(Exception):
    """Base class for every failure in the lookup chain"""


class NetworkError(PassLookupError):
    """Request never got a response (DNS, connection, timeout...)"""


class ResponseError(PassLookupError):
    """Unexpected status code or a payload we could not read"""

    def __init__(self, message, status_code=None, body=None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ServiceError(PassLookupError):
    """Upstream answered but reported a failure of its own"""

    def __init__(self, message, upstream_message=None):
        super().__init__(message)
        self.upstream_message = upstream_message


class ValidationError(PassLookupError):
    """Fly-over service rejected the coordinates"""

    def __init__(self, message, coordinates=None):
        super().__init__(message)
        self.coordinates = coordinates


Coordinates = namedtuple('Coordinates', ['latitude', 'longitude'])


class PassWindow(namedtuple('PassWindow', ['risetime', 'duration'])):
    """One predicted pass: rise time (epoch seconds) and duration (seconds)"""
    __slots__ = ()

    def rise_datetime(self, tz=pytz.utc):
        """Rise time as an aware datetime in the given timezone"""
        return datetime.fromtimestamp(self.risetime, tz)


@dataclass
class Config:
    """Configuration class to hold all settings"""
    ip_url: str = DEFAULT_IP_URL
    geo_url: str = DEFAULT_GEO_URL
    flyover_url: str = DEFAULT_FLYOVER_URL
    timeout: float = DEFAULT_TIMEOUT
    timezone_str: str = 'UTC'
    local_tz: pytz.BaseTzInfo = pytz.utc


def load_config(path='config.ini'):
    """Load configuration from config.ini, falling back to defaults"""
    config = configparser.ConfigParser(interpolation=None)
    config.read(path)

    services = config['services'] if config.has_section('services') else {}
    observer = config['observer'] if config.has_section('observer') else {}

    timezone_str = observer.get('timezone', 'UTC')
    try:
        local_tz = pytz.timezone(timezone_str)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone {timezone_str!r} in {path}, using UTC")
        timezone_str = 'UTC'
        local_tz = pytz.utc

    timeout_str = services.get('timeout', str(DEFAULT_TIMEOUT))
    try:
        timeout = float(timeout_str)
    except ValueError:
        timeout = None
    if timeout is None or not timeout > 0:
        logger.warning(f"Invalid timeout {timeout_str!r} in {path}, using {DEFAULT_TIMEOUT}s")
        timeout = DEFAULT_TIMEOUT

    return Config(
        ip_url=services.get('ip_url', DEFAULT_IP_URL),
        geo_url=services.get('geo_url', DEFAULT_GEO_URL),
        flyover_url=services.get('flyover_url', DEFAULT_FLYOVER_URL),
        timeout=timeout,
        timezone_str=timezone_str,
        local_tz=local_tz
    )


def _parse_json(response, what):
    try:
        return response.json()
    except ValueError as e:
        raise ResponseError(
            f"Could not parse {what} response: {response.text!r}",
            status_code=response.status_code,
            body=response.text
        ) from e


def _parse_pass(entry, response):
    """One {"risetime": int, "duration": int} entry; floats and strings are rejected"""
    fields = [entry.get(k) if isinstance(entry, dict) else None for k in ('risetime', 'duration')]
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in fields):
        raise ResponseError(
            f"Malformed pass entry in fly-over response: {entry!r}",
            status_code=response.status_code,
            body=response.text
        )
    return PassWindow(*fields)


class SatellitePassLookup:
    """Main class for the IP -> coordinates -> passes chain"""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    def _get(self, url, what, params=None):
        """Single GET; transport failures become NetworkError"""
        logger.debug(f"Requesting {what}: {url} {params or ''}")
        try:
            return requests.get(url, params=params, timeout=self.config.timeout)
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Network error when fetching {what}: {e}") from e

    def fetch_my_ip(self) -> str:
        """Return the public IP address of this machine"""
        response = self._get(self.config.ip_url, 'IP')

        if response.status_code != 200:
            raise ResponseError(
                f"Status Code {response.status_code} when fetching IP. Response: {response.text}",
                status_code=response.status_code,
                body=response.text
            )

        data = _parse_json(response, 'IP')
        ip = data.get('ip') if isinstance(data, dict) else None
        if not isinstance(ip, str) or not ip:
            raise ResponseError(
                f"No IP address in response: {response.text!r}",
                status_code=response.status_code,
                body=response.text
            )

        logger.info(f"Public IP: {ip}")
        return ip

    def fetch_coords_by_ip(self, ip: str) -> Coordinates:
        """Return approximate coordinates for an IP address"""
        url = self.config.geo_url.format(ip=ip)
        response = self._get(url, 'coordinates')

        # ipwho.is reports failures through the success flag, not the status code
        data = _parse_json(response, 'coordinates')
        if not isinstance(data, dict):
            raise ResponseError(
                f"Unexpected coordinates response: {response.text!r}",
                status_code=response.status_code,
                body=response.text
            )

        if not data.get('success'):
            upstream_message = data.get('message')
            raise ServiceError(
                f"Success status was {data.get('success')}. "
                f"Server message says: {upstream_message} when fetching for IP {data.get('ip', ip)}",
                upstream_message=upstream_message
            )

        try:
            coords = Coordinates(
                latitude=float(data['latitude']),
                longitude=float(data['longitude'])
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ResponseError(
                f"Missing latitude/longitude for IP {ip}: {response.text!r}",
                status_code=response.status_code,
                body=response.text
            ) from e

        logger.info(f"Coordinates for {ip}: {coords.latitude}, {coords.longitude}")
        return coords

    def fetch_flyover_times(self, coords: Coordinates) -> List[PassWindow]:
        """Return upcoming ISS passes for the given coordinates"""
        params = {'lat': coords.latitude, 'lon': coords.longitude}
        response = self._get(self.config.flyover_url, 'fly-over times', params=params)

        # TODO: switch to a status field once the fly-over service exposes one
        if response.text == INVALID_COORDINATES_BODY:
            raise ValidationError(
                f"You have entered invalid coordinates {coords.latitude}, {coords.longitude}, "
                f"with status code {response.status_code}",
                coordinates=coords
            )

        if response.status_code != 200:
            raise ResponseError(
                f"Status Code {response.status_code} when fetching fly-over times. Response: {response.text}",
                status_code=response.status_code,
                body=response.text
            )

        data = _parse_json(response, 'fly-over times')
        flyovers = data.get('response') if isinstance(data, dict) else None
        if not isinstance(flyovers, list):
            raise ResponseError(
                f"No pass list in fly-over response: {response.text!r}",
                status_code=response.status_code,
                body=response.text
            )

        passes = [_parse_pass(p, response) for p in flyovers]

        logger.info(f"Found {len(passes)} upcoming passes")
        return passes

    def next_passes_for_my_location(self) -> List[PassWindow]:
        """IP -> coordinates -> passes; any failure propagates unchanged"""
        ip = self.fetch_my_ip()
        coords = self.fetch_coords_by_ip(ip)
        return self.fetch_flyover_times(coords)


def next_passes_for_my_location(config: Optional[Config] = None) -> List[PassWindow]:
    """Convenience wrapper around SatellitePassLookup"""
    return SatellitePassLookup(config).next_passes_for_my_location()
