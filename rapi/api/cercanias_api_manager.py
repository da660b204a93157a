"""
Timetable API manager for fetching Cercanías data from the remote API.

This module handles all communication with the read-only timetable API:
stations, departure boards, routes, timetables and next-train lookups.
Transport errors, non-2xx responses and malformed bodies are mapped to a
small exception hierarchy so callers can show a specific message and
offer a manual retry. No request is retried here.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Set, TypeVar
from urllib.parse import quote

import aiohttp

from version import __api_provider__, get_user_agent
from ..managers.config_manager import APIConfig
from ..models.station_data import (
    ApiErrorResponse,
    RouteDetail,
    RouteSummary,
    Station,
    StationDepartures,
)
from ..models.train_data import NextTrainResponse, TimetableResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CercaniasAPIException(Exception):
    """Base exception for timetable API-related errors."""

    pass


class CercaniasInvalidURLException(CercaniasAPIException):
    """Exception for requests that cannot be turned into a valid URL."""

    pass


class CercaniasNetworkException(CercaniasAPIException):
    """Exception for network-related errors."""

    pass


class CercaniasServerException(CercaniasAPIException):
    """Exception for non-2xx responses."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class APINotFoundException(CercaniasServerException):
    """Exception for 404 responses."""

    def __init__(self, message: str):
        super().__init__(message, 404)


class CercaniasDataException(CercaniasAPIException):
    """Exception for response bodies that do not match the expected shape."""

    pass


def describe_error(error: Exception) -> str:
    """
    Get a user-facing message for a failed request.

    Every failure is recoverable, so each message invites a retry.
    """
    if isinstance(error, APINotFoundException):
        return f"{error} Check the selection and try again."
    if isinstance(error, CercaniasServerException):
        return "The timetable service is having problems right now. Please try again later."
    if isinstance(error, CercaniasNetworkException):
        return "Unable to reach the timetable service. Check your connection and try again."
    if isinstance(error, CercaniasDataException):
        return "The timetable service sent data we could not read. Please try again."
    if isinstance(error, CercaniasInvalidURLException):
        return "Please select both stations before searching."
    return f"Something went wrong: {error}"


@dataclass
class APIResponse:
    """Container for raw timetable API response data."""

    status_code: int
    data: Any
    text: str
    timestamp: datetime
    source: str


class HTTPClient(ABC):
    """Abstract HTTP client interface for dependency injection."""

    @abstractmethod
    async def get(self, url: str, params: Optional[Dict] = None) -> APIResponse:
        """Make HTTP GET request."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close HTTP client."""
        pass

    @abstractmethod
    def close_sync(self) -> None:
        """Close HTTP client synchronously."""
        pass


class AioHttpClient(HTTPClient):
    """Concrete HTTP client implementation using aiohttp."""

    def __init__(self, timeout_seconds: int = 10):
        """Initialize HTTP client with timeout."""
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session: Optional[aiohttp.ClientSession] = None
        self._close_tasks: Set[asyncio.Task] = set()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session is created."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                headers={"User-Agent": get_user_agent(), "Accept": "application/json"},
            )
        return self._session

    async def get(self, url: str, params: Optional[Dict] = None) -> APIResponse:
        """
        Make HTTP GET request.

        The body is decoded as UTF-8 (undecodable bytes are replaced) and then
        as JSON when possible; ``data`` is None otherwise and the text is
        always available.
        """
        session = await self._ensure_session()

        try:
            async with session.get(url, params=params or None) as response:
                body = await response.read()
                text = body.decode("utf-8", errors="replace")
                try:
                    data = json.loads(text)
                except ValueError:
                    data = None
                return APIResponse(
                    status_code=response.status,
                    data=data,
                    text=text,
                    timestamp=datetime.now(),
                    source=__api_provider__,
                )
        except asyncio.TimeoutError:
            raise CercaniasNetworkException(f"Request timed out: {url}")
        except aiohttp.ClientError as e:
            raise CercaniasNetworkException(f"Network error: {e}")

    async def close(self) -> None:
        """Close HTTP client."""
        if self._session and not self._session.closed:
            await self._session.close()

    def close_sync(self) -> None:
        """Close HTTP client synchronously (for shutdown)."""
        if self._session and not self._session.closed:
            try:
                try:
                    loop = asyncio.get_running_loop()
                except RuntimeError:
                    loop = None

                if loop is not None:
                    # Cannot block inside a running loop; schedule the close
                    task = loop.create_task(self._session.close())
                    self._close_tasks.add(task)
                    task.add_done_callback(self._close_tasks.discard)
                else:
                    asyncio.run(self._session.close())

                logger.debug("HTTP client session closed properly")
            except Exception as e:
                logger.warning(f"Error closing session: {e}")
            finally:
                self._session = None


class TimetableDataSource(ABC):
    """Abstract base class for timetable data sources."""

    @abstractmethod
    async def health_check(self) -> str:
        pass

    @abstractmethod
    async def fetch_all_stations(self, query: Optional[str] = None) -> List[Station]:
        pass

    @abstractmethod
    async def fetch_station(self, station_id: str) -> Station:
        pass

    @abstractmethod
    async def fetch_station_departures(
        self, station_id: str, date: Optional[str] = None, time: Optional[str] = None
    ) -> StationDepartures:
        pass

    @abstractmethod
    async def fetch_all_routes(self) -> List[RouteSummary]:
        pass

    @abstractmethod
    async def fetch_route(self, route_id: str) -> RouteDetail:
        pass

    @abstractmethod
    async def fetch_timetable(
        self, departure: str, arrival: str, date: Optional[str] = None
    ) -> TimetableResponse:
        pass

    @abstractmethod
    async def fetch_next_train(self, departure: str, arrival: str) -> NextTrainResponse:
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        """Shutdown the data source and cleanup resources."""
        pass


class CercaniasAPISource(TimetableDataSource):
    """
    Timetable API data source implementation.

    Builds request URLs, checks response status and parses bodies into
    the application models.
    """

    def __init__(self, http_client: HTTPClient, config: APIConfig):
        """Initialize with HTTP client and configuration."""
        self._http_client = http_client
        self._config = config
        self._base_url = config.base_url.rstrip("/")
        logger.debug(f"CercaniasAPISource initialized for {self._base_url}")

    def get_source_name(self) -> str:
        return __api_provider__

    def get_source_url(self) -> str:
        return self._base_url

    def _build_url(self, *segments: str) -> str:
        """
        Build an endpoint URL from path segments.

        Raises:
            CercaniasInvalidURLException: If a segment is empty
        """
        encoded = []
        for segment in segments:
            if segment is None or not segment.strip():
                raise CercaniasInvalidURLException(
                    f"Cannot build URL with empty path segment: {segments}"
                )
            encoded.append(quote(segment, safe=""))
        return "/".join([self._base_url] + encoded)

    async def _request(
        self,
        url: str,
        params: Optional[Dict] = None,
        not_found_message: str = "The requested data was not found.",
    ) -> APIResponse:
        """Perform a GET and map error statuses to exceptions."""
        response = await self._http_client.get(url, params)
        logger.debug(f"GET {url} -> {response.status_code}")

        if response.status_code == 404:
            error_body = self._parse_error_body(response)
            message = error_body.error if error_body else not_found_message
            logger.warning(f"Not found response from {url}: {response.text}")
            raise APINotFoundException(message)

        if response.status_code >= 400:
            error_body = self._parse_error_body(response)
            logger.error(f"Error response {response.status_code} from {url}: {response.text}")
            if error_body:
                raise CercaniasServerException(
                    f"API Error: {error_body.error}", response.status_code
                )
            raise CercaniasServerException(
                f"API returned status {response.status_code}", response.status_code
            )

        return response

    @staticmethod
    def _parse_error_body(response: APIResponse) -> Optional[ApiErrorResponse]:
        if not isinstance(response.data, dict):
            return None
        try:
            return ApiErrorResponse.model_validate(response.data)
        except ValueError:
            return None

    @staticmethod
    def _decode(response: APIResponse, parser: Callable[[Any], T], what: str) -> T:
        """
        Parse a response body.

        Raises:
            CercaniasDataException: If the body is not JSON or has the wrong shape
        """
        if response.data is None:
            raise CercaniasDataException(f"{what}: response body is not valid JSON")
        try:
            return parser(response.data)
        except (ValueError, TypeError) as e:
            logger.error(f"Decoding error for {what}: {e}")
            raise CercaniasDataException(f"{what} could not be decoded: {e}")

    @staticmethod
    def _parse_list(model, data: Any) -> list:
        if not isinstance(data, list):
            raise ValueError(f"expected a JSON list, got {type(data).__name__}")
        return [model.model_validate(item) for item in data]

    async def health_check(self) -> str:
        response = await self._request(self._base_url)
        return response.text

    async def fetch_all_stations(self, query: Optional[str] = None) -> List[Station]:
        """
        Fetch all stations, optionally filtered by a search query.

        An empty query is not sent.
        """
        params = {"q": query} if query else None
        response = await self._request(self._build_url("stations"), params)
        stations = self._decode(
            response, lambda data: self._parse_list(Station, data), "Station list"
        )
        logger.info(f"Fetched {len(stations)} stations")
        return stations

    async def fetch_station(self, station_id: str) -> Station:
        response = await self._request(
            self._build_url("stations", station_id),
            not_found_message=f"Station with ID '{station_id}' not found.",
        )
        return self._decode(response, Station.model_validate, "Station")

    async def fetch_station_departures(
        self, station_id: str, date: Optional[str] = None, time: Optional[str] = None
    ) -> StationDepartures:
        params = {}
        if date:
            params["date"] = date
        if time:
            params["time"] = time

        response = await self._request(
            self._build_url("stations", station_id, "departures"),
            params or None,
            not_found_message=f"Station with ID '{station_id}' not found.",
        )
        return self._decode(response, StationDepartures.model_validate, "Station departures")

    async def fetch_all_routes(self) -> List[RouteSummary]:
        response = await self._request(self._build_url("routes"))
        return self._decode(
            response, lambda data: self._parse_list(RouteSummary, data), "Route list"
        )

    async def fetch_route(self, route_id: str) -> RouteDetail:
        """
        Fetch a route and its ordered stops.

        Raises:
            APINotFoundException: If the route does not exist
            CercaniasServerException: For other error statuses
            CercaniasDataException: If the body cannot be decoded
        """
        cleaned_route_id = (route_id or "").strip()
        response = await self._request(
            self._build_url("routes", cleaned_route_id),
            not_found_message=f"Route with ID '{cleaned_route_id}' not found.",
        )
        route = self._decode(response, RouteDetail.model_validate, f"Route {cleaned_route_id}")
        logger.info(
            f"Decoded route {cleaned_route_id}: {route.route_short_name} - {len(route.stops)} stops"
        )
        return route

    async def fetch_timetable(
        self, departure: str, arrival: str, date: Optional[str] = None
    ) -> TimetableResponse:
        """Fetch the timetable between two stations for a date (today if None)."""
        params = {"date": date} if date else None
        response = await self._request(
            self._build_url("timetable", departure, arrival),
            params,
            not_found_message=f"No timetable found from {departure} to {arrival}.",
        )
        timetable = self._decode(response, TimetableResponse.from_api, "Timetable")
        logger.info(f"Fetched {len(timetable.timetable)} trains from {departure} to {arrival}")
        return timetable

    async def fetch_next_train(self, departure: str, arrival: str) -> NextTrainResponse:
        """Fetch the next train between two stations."""
        response = await self._request(
            self._build_url("timetable", departure, arrival, "next"),
            not_found_message=f"No upcoming train found from {departure} to {arrival}.",
        )
        return self._decode(response, NextTrainResponse.from_api, "Next train")

    async def shutdown(self) -> None:
        await self._http_client.close()
        logger.info("CercaniasAPISource shutdown complete")

    def shutdown_sync(self) -> None:
        if hasattr(self._http_client, "close_sync"):
            self._http_client.close_sync()
        logger.debug("CercaniasAPISource synchronous shutdown complete")


class CercaniasAPIFactory:
    """Factory for creating timetable API data sources."""

    @staticmethod
    def create_aiohttp_source(config: APIConfig) -> CercaniasAPISource:
        """Create data source backed by aiohttp."""
        http_client = AioHttpClient(timeout_seconds=config.timeout_seconds)
        return CercaniasAPISource(http_client, config)

    @staticmethod
    def create_source_from_config(config: APIConfig) -> TimetableDataSource:
        return CercaniasAPIFactory.create_aiohttp_source(config)
