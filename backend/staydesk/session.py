"""Per-request booking session passed explicitly through the services."""

from dataclasses import dataclass

from staydesk.config import settings


@dataclass(frozen=True)
class BookingSession:
    user_id: str | None = None
    token: str | None = None
    currency: str = settings.default_currency
    language: str = settings.default_language

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def auth_headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
