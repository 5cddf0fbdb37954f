"""Built-in onboarding flow: accept the privacy policy, log in, reach main."""

from __future__ import annotations

from typing import Optional

from storage.flag_store import FlagStore

from .definition import FlowDef, StepDef
from .resolver import FlowResolver

PRIVACY_POLICY_ROUTE = "privacy_policy"
LOGIN_ROUTE = "login"
MAIN_ROUTE = "main"

KEY_PRIVACY_POLICY_AGREED = "privacy_policy_agreed"
KEY_LOGGED_IN = "logged_in"


class UserFlags:
    """Named accessors for the two flags the onboarding flow depends on"""

    def __init__(self, store: FlagStore):
        self.store = store

    def has_agreed_to_privacy_policy(self) -> bool:
        return self.store.get(KEY_PRIVACY_POLICY_AGREED, False)

    def set_privacy_policy_agreed(self, agreed: bool) -> None:
        self.store.set(KEY_PRIVACY_POLICY_AGREED, agreed)

    def is_logged_in(self) -> bool:
        return self.store.get(KEY_LOGGED_IN, False)

    def set_logged_in(self, logged_in: bool) -> None:
        self.store.set(KEY_LOGGED_IN, logged_in)


def onboarding_flow() -> FlowDef:
    return FlowDef(
        name="onboarding",
        default_destination=MAIN_ROUTE,
        steps=[
            StepDef(id="privacy", payload=PRIVACY_POLICY_ROUTE, flag=KEY_PRIVACY_POLICY_AGREED,
                    description="User accepted the privacy policy"),
            StepDef(id="login", payload=LOGIN_ROUTE, depends_on=["privacy"], flag=KEY_LOGGED_IN,
                    description="User is logged in"),
            # never met on its own: main is where the flow ends, not a gate
            StepDef(id="main", payload=MAIN_ROUTE, depends_on=["login"], ready=False,
                    description="Main screen"),
        ],
    )


def create_onboarding_resolver(store: Optional[FlagStore] = None, strict: bool = False) -> FlowResolver:
    return FlowResolver.from_definition(onboarding_flow(), store or FlagStore(), strict=strict)
