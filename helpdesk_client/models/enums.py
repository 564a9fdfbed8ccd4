"""Closed value sets shared with the helpdesk API."""

from __future__ import annotations

import enum


class UserRole(str, enum.Enum):
    user = "user"
    admin = "admin"
    super_admin = "super_admin"


class TicketStatus(str, enum.Enum):
    open = "Open"
    in_progress = "In Progress"
    resolved = "Resolved"
    closed = "Closed"


class Department(str, enum.Enum):
    hr = "HR"
    audit = "Audit"
    supply_chain = "Supply Chain"
    admin = "Admin"
    production = "Production"
    finance = "Finance"
    maintenance = "Maintenance"
    it = "IT"


class SenderType(str, enum.Enum):
    user = "user"
    staff = "staff"


class TicketCategory(str, enum.Enum):
    office = "Office Issue"
    vehicle = "Vehicle Issue"
    accommodation = "Accommodation/Housing Issues"


class NoticeLevel(str, enum.Enum):
    success = "success"
    error = "error"
    info = "info"


SUB_CATEGORIES: dict[TicketCategory, tuple[str, ...]] = {
    TicketCategory.office: ("Water/Plumbing", "Electrical", "Furniture", "Cleaning", "Others"),
    TicketCategory.vehicle: (
        "Maintenance",
        "Battery",
        "Mechanical",
        "Accident",
        "Tyre",
        "Registration",
        "Others",
    ),
    TicketCategory.accommodation: (
        "Generator",
        "Water/Plumbing",
        "Electrical",
        "Furniture",
        "Environment",
        "Others",
    ),
}

STAFF_LOCATIONS: tuple[str, ...] = (
    "KAM HQ",
    "KSICL – Jimba",
    "KSICL – Sagamu",
    "KAM Haulage",
    "Dimkit Ganmo",
    "Dimkit Kaduna",
    "Lagos Office",
)

ACCOMMODATION_LOCATIONS: tuple[str, ...] = (
    "GCFO Quarters – Irewolede Estate",
    "New House – Irewolede Estate",
    "GRA Quarters – Trove Street, Flower Garden, GRA",
    "Honourable Qtrs 1 – Legislative Qtrs Estate",
    "Honourable Qtrs 2 – Legislative Qtrs Estate",
    "Yellow House – Mandate III Estate",
    "Ghosh House – Mandate III Estate",
    "Jaspal House – Mandate III Estate",
    "Ofa Garage",
)
