"""
Package catalogue and selection.

Selecting a package records an order (payment is handled offline, so it
starts ``pending``) and writes ``dashboardData``, which completes
onboarding.
"""

from __future__ import annotations

from typing import Optional

from errors import ValidationError
from repositories.business_repository import BusinessProfileRepository, OrderRepository
from schemas.models.business import BusinessType
from schemas.models.package import FormationPackage, OrderDoc
from services.auth.identity import CurrentUser
from services.onboarding_store import OnboardingStore
from shared.datetime_utils import Clock, utc_now
from shared.logging import get_logger
from shared.packages import find_package, packages_for_type

log = get_logger(__name__)

FORM_MISSING = "Please complete the business formation form before choosing a package."


class PricingService:
    def __init__(
        self,
        orders: OrderRepository,
        business_profiles: BusinessProfileRepository,
        onboarding: OnboardingStore,
        clock: Clock = utc_now,
    ) -> None:
        self._orders = orders
        self._profiles = business_profiles
        self._onboarding = onboarding
        self._clock = clock

    async def list_packages(
        self, user: CurrentUser, business_type: Optional[str] = None
    ) -> tuple[Optional[str], list[FormationPackage]]:
        """Packages for *business_type*, or for the type in the stored intake."""
        if business_type is None:
            form = await self._onboarding.load_business_form(user.user_id) or {}
            business_type = form.get("businessType")
        resolved = BusinessType.parse(business_type)
        label = resolved.value if resolved else business_type
        return label, packages_for_type(business_type)

    async def select_package(
        self, user: CurrentUser, package_name: str
    ) -> tuple[OrderDoc, dict]:
        form = await self._onboarding.load_business_form(user.user_id)
        if form is None:
            raise ValidationError(FORM_MISSING, field="package_name")

        business_type = form.get("businessType")
        package = find_package(business_type, package_name)
        if package is None:
            raise ValidationError(
                f"Package '{package_name}' is not available for {business_type or 'this business type'}.",
                field="package_name",
            )

        form["selectedPackage"] = package.name
        await self._onboarding.save_business_form(user.user_id, form)

        profile = await self._profiles.find_latest_for_user(user.user_id)
        now = self._clock()
        order = await self._orders.insert(
            OrderDoc(
                user_id=user.user_id,
                business_profile_id=str(profile.id) if profile else None,
                package_name=package.name,
                business_type=str(business_type),
                price=package.price,
                created_at=now,
                updated_at=now,
            )
        )

        dashboard_data = {
            "businessProfile": profile.to_public() if profile else None,
            "ownerInfo": {
                "name": form.get("ownerName"),
                "phone": form.get("ownerPhone"),
                "address": form.get("ownerAddress"),
                "email": form.get("ownerEmail"),
            },
            "members": form.get("members", []),
            "selectedPackage": {"name": package.name, "price": package.price},
            "orderId": str(order.id),
        }
        await self._onboarding.save_dashboard(user.user_id, dashboard_data)
        log.info(
            "package_selected",
            user_id=user.user_id,
            package=package.name,
            price=package.price,
        )
        return order, dashboard_data
