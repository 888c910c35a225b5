"""
Guest and admin messages around a reservation. Plain text; delivery through the injected Notifier.

Best effort: a failed send is logged and reported as False, never raised to the booking flow.
Walk-in rows never get guest-facing messages.
"""
import logging

from tablebook.config import Settings
from tablebook.core.constants import LATE_ARRIVAL_GRACE_MINUTES
from tablebook.core.errors import NotifierUnavailable
from tablebook.models.reservation import Reservation
from tablebook.services.email_notify import Notifier
from tablebook.services.loyalty import LoyaltyStatus, ordinal, unlocked_now

logger = logging.getLogger(__name__)


def cancel_url(settings: Settings, reservation: Reservation) -> str:
    return f"{settings.base_url.rstrip('/')}/cancel/{reservation.cancel_token}"


def _deliver(notifier: Notifier, address: str, subject: str, body: str) -> bool:
    if not (address or "").strip():
        return False
    try:
        notifier.send(address, subject, body)
        return True
    except NotifierUnavailable as e:
        logger.warning("Notification to %s failed (%s): %s", address, subject, e)
        return False


def _details(settings: Settings, r: Reservation) -> list[str]:
    lines = [f"Date     {r.date}", f"Time     {r.time}", f"Guests   {r.guests}"]
    if settings.venue_address:
        lines.append(f"Address  {settings.venue_address}")
    return lines


def render_confirmation(settings: Settings, r: Reservation, loyalty: LoyaltyStatus) -> tuple[str, str]:
    lines = [
        f"Hi {r.first_name} {r.name},",
        "",
        "Thank you for your reservation. We look forward to welcoming you.",
        "",
        *_details(settings, r),
        "",
        f"This is your {ordinal(loyalty.visit_index)} visit.",
    ]
    unlocked = unlocked_now(loyalty.visit_index)
    if unlocked:
        lines.append(f"You made our day! From now on you enjoy a {unlocked}% loyalty thank-you.")
    elif loyalty.tier:
        lines.append(f"Your loyalty thank-you: {loyalty.tier}%.")
    if loyalty.next_milestone:
        lines.append(f"Heads-up: on your next visit you will receive a {loyalty.next_milestone}% loyalty thank-you.")
    lines += [
        "",
        f"Please arrive on time; tables may be released after {LATE_ARRIVAL_GRACE_MINUTES} minutes of delay.",
        "",
        f"Cancel reservation: {cancel_url(settings, r)}",
        "",
        f"Warm regards from {settings.brand_name}",
    ]
    return f"{settings.brand_name} - Reservation", "\n".join(lines)


def render_reminder(settings: Settings, r: Reservation) -> tuple[str, str]:
    lines = [
        f"Hi {r.first_name} {r.name},",
        "",
        "Friendly reminder for your reservation tomorrow:",
        "",
        *_details(settings, r),
        "",
        f"If your plans change, please cancel here: {cancel_url(settings, r)}",
        "",
        f"See you soon,\n{settings.brand_name}",
    ]
    return f"{settings.brand_name} - Reservation reminder", "\n".join(lines)


def render_cancellation(settings: Settings, r: Reservation, loyalty: LoyaltyStatus) -> tuple[str, str]:
    lines = [
        f"Hi {r.first_name} {r.name},",
        "",
        "Your reservation has been canceled:",
        "",
        *_details(settings, r),
        "",
    ]
    if loyalty.tier:
        lines.append(f"Your {loyalty.tier}% loyalty thank-you stays with you for your next visit.")
    lines.append(f"We hope to welcome you another time.\n{settings.brand_name}")
    return f"{settings.brand_name} - Reservation canceled", "\n".join(lines)


def notify_booking_confirmed(notifier: Notifier, settings: Settings, r: Reservation, loyalty: LoyaltyStatus) -> bool:
    """Guest confirmation + admin notice. Returns whether the guest mail went out."""
    if r.is_walk_in:
        return False
    subject, body = render_confirmation(settings, r, loyalty)
    sent = _deliver(notifier, r.email, subject, body)
    _deliver(
        notifier,
        settings.admin_email,
        f"[NEW] {r.date} {r.time} - {r.guests}p",
        f"New reservation\n{r.date} {r.time} - {r.guests}p - {r.first_name} {r.name} ({r.email})\n"
        f"Visit #{loyalty.visit_index}, loyalty {loyalty.tier}%",
    )
    return sent


def notify_booking_canceled(notifier: Notifier, settings: Settings, r: Reservation, loyalty: LoyaltyStatus) -> bool:
    if r.is_walk_in:
        return False
    subject, body = render_cancellation(settings, r, loyalty)
    sent = _deliver(notifier, r.email, subject, body)
    _deliver(
        notifier,
        settings.admin_email,
        f"[CANCELED] {r.date} {r.time} - {r.guests}p",
        f"Reservation canceled\n{r.date} {r.time} - {r.guests}p - {r.first_name} {r.name} ({r.email})\n"
        f"Remaining visits {loyalty.visit_index}, loyalty {loyalty.tier}%",
    )
    return sent
