"""
Example catalog and answer maps for demos and tests.

A small moving-checklist catalog covering every condition shape the engine
handles: unconditional, direct Yes/No, multi-select, computed fields,
numeric comparators, multi-field AND and a parent container.
"""
from typing import Any, Dict, List

from taskgen.conditions import ConditionSpec
from taskgen.model import CatalogEntry, TaskType


def build_example_catalog() -> List[CatalogEntry]:
    def entry(entry_id, title, conditions=None, urgency=50, task_type=TaskType.ORDINARY, **metadata):
        return CatalogEntry(
            id=entry_id,
            title=title,
            conditions=ConditionSpec.from_mapping(conditions),
            task_type=task_type,
            urgency_percentage=urgency,
            metadata=metadata,
        )

    return [
        entry("FORWARD_MAIL", "Set up mail forwarding", urgency=70, category="admin"),
        entry("BOOK_MOVERS", "Book professional movers", {"hireMovers": ["Yes"]}, urgency=90, category="moving"),
        entry("PET_RECORDS", "Collect pet vet records", {"anyPets": ["Yes"]}, category="pets"),
        entry(
            "NEW_LEASE_REVIEW",
            "Review the new lease",
            {"newRentOrOwn": ["Rent"], "newDwellingType": ["Apartment", "Condo"]},
            urgency=80,
            category="housing",
        ),
        entry("CANCEL_YOGA", "Cancel or transfer yoga studio membership",
              {"fitnessWellness": ["Yoga"], "moveDistance": ["Long Distance"]}, category="fitness"),
        entry("UPDATE_BANK", "Update bank address",
              {"financialInstitutions": ["Bank Account", "Credit Union"]}, category="finance"),
        entry("DMV_LICENSE", "Get a new driver's license", {"isInterstate": ["Yes"]}, urgency=40, category="admin"),
        entry("SCHOOL_ENROLL", "Enroll kids in a new school",
              {"schoolAgeChildren": [">=1"], "moveDistance": ["Long Distance"]}, urgency=85, category="family"),
        entry("DAYCARE_SEARCH", "Find a daycare", {"childrenUnder5": [">=1"]}, category="family"),
        entry("HEALTH_GROUP", "Healthcare address updates", {"healthcareProviders": ["Doctor"]},
              task_type=TaskType.PARENT_CONTAINER),
    ]


def example_answers() -> Dict[str, Any]:
    """A long-distance, interstate renter with a dog and two school-age kids."""
    return {
        "currentRentOrOwn": "Own",
        "newRentOrOwn": "Rent",
        "newDwellingType": "Apartment",
        "anyPets": "Yes",
        "hireMovers": "Yes",
        "fitnessWellness": ["Gym", "Yoga"],
        "financialInstitutions": ["Credit Card"],
        "healthcareProviders": ["Doctor", "Dentist"],
        "moveDistance": "Long Distance",
        "isInterstate": "Yes",
        "schoolAgeChildren": 2,
        "childrenUnder5": 0,
    }
