from __future__ import annotations

from flow.onboarding import UserFlags, create_onboarding_resolver
from storage.flag_store import FlagStore


def main() -> None:
    print("=" * 60)
    print("Onboarding flow walkthrough")
    print("=" * 60)

    store = FlagStore()
    user = UserFlags(store)
    resolver = create_onboarding_resolver(store)

    print(resolver.render_graph())
    print(f"Start: {resolver.next_step()}")

    user.set_privacy_policy_agreed(True)
    print(f"After accepting the privacy policy: {resolver.next_step()}")

    user.set_logged_in(True)
    print(f"After logging in: {resolver.next_step()}")

    user.set_logged_in(False)
    print(f"After logging out: {resolver.next_step()}")


if __name__ == "__main__":
    main()
