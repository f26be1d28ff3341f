from decimal import Decimal

# A limit of -1 means "no cap"
UNLIMITED = -1

ROLES = ("owner", "admin", "trainer", "member")

FEATURES = (
    "marketplace",
    "scheduling",
    "crm",
    "whatsapp",
    "ai_assistant",
    "advanced_reports",
    "api_access",
    "custom_domain",
    "white_label",
)

# Starting point of a custom plan before a base plan is picked
DEFAULT_DRAFT_LIMITS = {"owner": 1, "admin": 0, "trainer": 0, "member": 0}


def _features(*enabled):
    return {feature: feature in enabled for feature in FEATURES}


DEFAULT_PLAN_CONFIGS = [
    {
        "plan": "individual",
        "display_name": "Individual",
        "tenant_type": "individual",
        "limits": {"owner": 1, "admin": 0, "trainer": 0, "member": 0},
        "price": Decimal("0.00"),
        "extra_slot_price": {},
        "features": _features("scheduling"),
    },
    {
        "plan": "starter",
        "display_name": "Starter",
        "tenant_type": "business",
        "limits": {"owner": 1, "admin": 1, "trainer": 3, "member": 50},
        "price": Decimal("99.90"),
        "extra_slot_price": {"admin": "19.90", "trainer": "14.90", "member": "2.90"},
        "features": _features("scheduling", "marketplace", "whatsapp"),
    },
    {
        "plan": "professional",
        "display_name": "Professional",
        "tenant_type": "business",
        "limits": {"owner": 1, "admin": 3, "trainer": 15, "member": 200},
        "price": Decimal("199.90"),
        "extra_slot_price": {"admin": "17.90", "trainer": "12.90", "member": "1.90"},
        "features": _features(
            "scheduling", "marketplace", "whatsapp", "crm", "advanced_reports", "api_access", "custom_domain",
        ),
    },
    {
        "plan": "enterprise",
        "display_name": "Enterprise",
        "tenant_type": "business",
        "limits": {"owner": 1, "admin": UNLIMITED, "trainer": UNLIMITED, "member": UNLIMITED},
        "price": Decimal("399.90"),
        "extra_slot_price": {},
        "features": _features(*FEATURES),
    },
]
