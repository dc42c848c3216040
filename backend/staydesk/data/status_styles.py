"""Status badge styles for bookings, invoices and payments.

Each record type has its own closed status set and a fixed style table.
Statuses the backend adds later fall back to the neutral badge.
"""

from enum import Enum

NEUTRAL_BADGE = "bg-gray-100 text-gray-800"


class BookingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    INVOICED = "invoiced"
    PAID = "paid"
    CONFIRMED = "confirmed"


class InvoiceStatus(str, Enum):
    INVOICED = "invoiced"
    PAID = "paid"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class RecordType(str, Enum):
    BOOKING = "booking"
    INVOICE = "invoice"
    PAYMENT = "payment"


BOOKING_BADGES: dict[BookingStatus, str] = {
    BookingStatus.PENDING: "bg-yellow-100 text-yellow-800",
    BookingStatus.APPROVED: "bg-blue-100 text-blue-800",
    BookingStatus.DENIED: "bg-red-100 text-red-800",
    BookingStatus.INVOICED: "bg-purple-100 text-purple-800",
    BookingStatus.PAID: "bg-green-100 text-green-800",
    BookingStatus.CONFIRMED: "bg-emerald-100 text-emerald-800",
}

INVOICE_BADGES: dict[InvoiceStatus, str] = {
    InvoiceStatus.INVOICED: "bg-yellow-100 text-yellow-800",
    InvoiceStatus.PAID: "bg-green-100 text-green-800",
    InvoiceStatus.CANCELLED: "bg-red-100 text-red-800",
}

PAYMENT_BADGES: dict[PaymentStatus, str] = {
    PaymentStatus.PENDING: "bg-yellow-100 text-yellow-800",
    PaymentStatus.PROCESSING: "bg-blue-100 text-blue-800",
    PaymentStatus.COMPLETED: "bg-green-100 text-green-800",
    PaymentStatus.FAILED: "bg-red-100 text-red-800",
}

_TABLES: dict[RecordType, tuple[type[Enum], dict]] = {
    RecordType.BOOKING: (BookingStatus, BOOKING_BADGES),
    RecordType.INVOICE: (InvoiceStatus, INVOICE_BADGES),
    RecordType.PAYMENT: (PaymentStatus, PAYMENT_BADGES),
}


def badge_class(record_type: RecordType, status: str) -> str:
    """Style class for a status of the given record type."""
    status_enum, table = _TABLES[record_type]
    try:
        return table[status_enum(status)]
    except ValueError:
        return NEUTRAL_BADGE


def badge_label(status: str) -> str:
    return status[:1].upper() + status[1:]


def all_badges() -> dict[str, dict[str, str]]:
    """Every known status style, grouped by record type."""
    return {
        record_type.value: {status.value: style for status, style in table.items()}
        for record_type, (_, table) in _TABLES.items()
    }
