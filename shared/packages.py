"""
Formation package catalogue.

Every business type offers a Standard package, and all but sole
proprietorships an Express one. Sole proprietors only get DBA
registration. Prices are whole US dollars.
"""

from __future__ import annotations

from schemas.models.business import BusinessType
from schemas.models.package import FormationPackage

_EXPRESS_FEATURES = [
    "Same-day processing",
    "Priority support",
    "All standard features",
    "Express filing",
    "Response within 5 business hours",
]


def _express(label: str, description: str) -> FormationPackage:
    return FormationPackage(
        name=f"Express {label}",
        price=499,
        description=description,
        features=list(_EXPRESS_FEATURES),
        is_express=True,
    )


def _standard(label: str, price: int, description: str, document: str) -> FormationPackage:
    return FormationPackage(
        name=f"Standard {label}",
        price=price,
        description=description,
        features=[
            "State filing",
            document,
            "Tax ID",
            "Basic support",
            "Response within 5 business days",
        ],
        is_express=False,
    )


PACKAGES: dict[BusinessType, list[FormationPackage]] = {
    BusinessType.LLC: [
        _express("LLC", "Fast-track LLC formation"),
        _standard("LLC", 99, "Basic LLC formation", "Operating agreement"),
    ],
    BusinessType.CORPORATION: [
        _express("Corporation", "Fast-track incorporation"),
        _standard("Corporation", 125, "Basic incorporation", "Bylaws"),
    ],
    BusinessType.PARTNERSHIP: [
        _express("Partnership", "Fast-track partnership formation"),
        _standard(
            "Partnership", 99, "Basic partnership formation", "Partnership agreement"
        ),
    ],
    BusinessType.SOLE_PROPRIETORSHIP: [
        FormationPackage(
            name="DBA Registration",
            price=100,
            description="DBA filing for different business name",
            features=[
                "DBA filing",
                "Name search",
                "Basic support",
                "Processing within 5-7 days",
                "Response within 5 business days",
            ],
            is_express=False,
        ),
    ],
}


def packages_for_type(business_type: str | None) -> list[FormationPackage]:
    """Return the packages offered for *business_type* (case-insensitive).

    Unknown or missing types yield an empty list.
    """
    resolved = BusinessType.parse(business_type)
    if resolved is None:
        return []
    return [p.model_copy(deep=True) for p in PACKAGES[resolved]]


def find_package(business_type: str | None, package_name: str) -> FormationPackage | None:
    for package in packages_for_type(business_type):
        if package.name == package_name:
            return package
    return None
