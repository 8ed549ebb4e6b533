"""Data models for Tuya Free Cooling integration."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TuyaCredentials:
    """Tuya cloud project credentials, read-only for the lifetime of an entry."""

    access_key: str
    secret_key: str


@dataclass(frozen=True)
class Token:
    """Represents an access token acquired for a single control cycle."""

    value: str
    issued_at: int  # Epoch milliseconds


@dataclass(frozen=True, slots=True)
class TemperatureReading:
    """A temperature sample together with the instant it was observed."""

    celsius: float
    observed_at: int  # Epoch milliseconds

    def age_minutes(self, now_ms: int) -> int:
        """Return whole minutes elapsed since the observation."""
        return max(0, (now_ms - self.observed_at) // 60_000)


@dataclass(frozen=True)
class SignedRequest:
    """Signature material for exactly one outgoing Tuya API call.

    Attributes:
        timestamp: Epoch milliseconds used in the signature, as a string.
        canonical_path: Path and canonical query the request must target.
        client_id: Tuya access key.
        sign: Upper-case hex HMAC-SHA256 signature.
        sign_method: Signature algorithm name.
        access_token: Bearer token, absent for token acquisition.

    """

    timestamp: str
    canonical_path: str
    client_id: str
    sign: str
    sign_method: str
    access_token: str | None = None

    @property
    def headers(self) -> dict[str, str]:
        """Return the HTTP headers carrying this signature."""
        headers = {
            "t": self.timestamp,
            "sign_method": self.sign_method,
            "client_id": self.client_id,
            "sign": self.sign,
        }
        if self.access_token is not None:
            headers["access_token"] = self.access_token
        return headers


@dataclass(frozen=True)
class Decision:
    """Outcome of comparing the desired switch state with the stored one."""

    desired_state: bool
    changed: bool


@dataclass(slots=True)
class CycleResult:
    """Represents the outcome of one successful control cycle."""

    indoor: TemperatureReading
    outdoor: TemperatureReading
    desired_state: bool
    changed: bool
    command_sent: bool
