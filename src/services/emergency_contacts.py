"""Directory of national emergency numbers with one-tap dialing."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

import structlog
from pydantic import BaseModel, ConfigDict

from src.services.escalation.capabilities import CallError

if TYPE_CHECKING:
    from src.services.escalation.capabilities import CallPlacer

logger = structlog.get_logger(__name__)


class EmergencyContact(BaseModel):
    """A single emergency service and its short dialing code."""

    model_config = ConfigDict(frozen=True)

    name: str
    number: str
    service: str  # "police", "fire", "ambulance", "emergency", "disaster"
    available: str = "24x7"


EMERGENCY_CONTACTS: Final[tuple[EmergencyContact, ...]] = (
    EmergencyContact(name="Police", number="100", service="police"),
    EmergencyContact(name="Fire Brigade", number="101", service="fire"),
    EmergencyContact(name="Ambulance", number="108", service="ambulance"),
    EmergencyContact(name="Emergency", number="112", service="emergency"),
    EmergencyContact(name="Disaster Management", number="1078", service="disaster"),
)


class EmergencyContactsDirectory:
    """Lists emergency contacts and dials them through a :class:`CallPlacer`.

    Unlike the escalation controller, a manual dial is a direct user
    action: failures are logged and re-raised so the caller can tell the
    user the call did not go through.
    """

    __slots__ = ("_call_placer", "_contacts")

    def __init__(
        self,
        call_placer: CallPlacer,
        contacts: tuple[EmergencyContact, ...] = EMERGENCY_CONTACTS,
    ) -> None:
        self._call_placer = call_placer
        self._contacts = contacts

    @property
    def contacts(self) -> list[EmergencyContact]:
        return list(self._contacts)

    def find(self, number: str) -> EmergencyContact | None:
        return next((c for c in self._contacts if c.number == number.strip()), None)

    def by_service(self, service: str) -> EmergencyContact | None:
        return next((c for c in self._contacts if c.service == service.lower()), None)

    def dial(self, number: str) -> EmergencyContact:
        """Place a call to a listed number.

        Raises
        ------
        ValueError
            If *number* is not in the directory.
        CallError
            If the call could not be placed.
        """
        contact = self.find(number)
        if contact is None:
            raise ValueError(f"Not an emergency contact: {number!r}")

        try:
            self._call_placer.place_emergency_call(contact.number)
        except CallError:
            logger.error("contacts.dial_failed", number=contact.number, exc_info=True)
            raise

        logger.info("contacts.dialed", name=contact.name, number=contact.number)
        return contact
