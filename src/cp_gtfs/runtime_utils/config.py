import os
from dataclasses import dataclass, field
from typing import Optional
from zoneinfo import ZoneInfo

from cp_gtfs.runtime_utils.feed_exception import ArgumentException

OPERATOR_TIMEZONE = "Europe/Lisbon"


@dataclass(frozen=True)
class AgencyConfig:
    """
    values for the agency and feed_info tables. defaults describe
    Comboios de Portugal and the feed publisher.
    """

    agency_id: str = "cp"
    agency_name: str = "Comboios de Portugal"
    agency_url: str = "https://www.cp.pt/"
    agency_lang: str = "pt"
    agency_phone: str = "+351707210220"
    agency_fare_url: str = "https://www.cp.pt/passageiros/pt/comprar-bilhetes"
    agency_email: str = ""

    feed_publisher_name: str = "gtfs.directory"
    feed_publisher_url: str = "https://gtfs.directory"
    feed_lang: str = "pt"
    feed_version: str = ""


@dataclass(frozen=True)
class FeedConfig:
    """
    runtime settings for a feed build
    """

    provider_base_url: Optional[str] = None
    timezone_name: str = OPERATOR_TIMEZONE
    concurrency: int = 16
    request_timeout: float = 10.0
    max_attempts: int = 3
    agency: AgencyConfig = field(default_factory=AgencyConfig)

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ArgumentException(f"concurrency must be at least 1, got {self.concurrency}")
        if self.max_attempts < 1:
            raise ArgumentException(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.request_timeout <= 0:
            raise ArgumentException(f"request_timeout must be positive, got {self.request_timeout}")

    @property
    def timezone(self) -> ZoneInfo:
        """operator timezone all service days are anchored in"""
        return ZoneInfo(self.timezone_name)

    @classmethod
    def from_environment(cls) -> "FeedConfig":
        """build a config from environment variables, falling back to defaults"""
        try:
            return cls(
                provider_base_url=os.environ.get("PROVIDER_BASE_URL"),
                timezone_name=os.environ.get("FEED_TIMEZONE", OPERATOR_TIMEZONE),
                concurrency=int(os.environ.get("FEED_CONCURRENCY", "16")),
                request_timeout=float(os.environ.get("FEED_REQUEST_TIMEOUT", "10")),
                max_attempts=int(os.environ.get("FEED_MAX_ATTEMPTS", "3")),
            )
        except ValueError as exception:
            raise ArgumentException(f"invalid feed configuration in environment: {exception}") from exception
