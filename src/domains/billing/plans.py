"""Subscription plan catalogue."""

from dataclasses import asdict, dataclass, field

UNLIMITED = -1


@dataclass(frozen=True)
class Plan:
    name: str
    price: float
    api_calls: int
    features: list[str] = field(default_factory=list)

    @property
    def is_unlimited(self) -> bool:
        return self.api_calls == UNLIMITED

    def to_dict(self, plan_id: str) -> dict:
        data = asdict(self)
        data["id"] = plan_id
        data["api_calls"] = "Unlimited" if self.is_unlimited else self.api_calls
        return data


PLAN_FEATURES: dict[str, Plan] = {
    "free": Plan(
        name="Free",
        price=0,
        api_calls=1000,
        features=["Basic risk analysis", "Standard sanctions screening", "Email support"],
    ),
    "starter": Plan(
        name="Starter",
        price=29,
        api_calls=10000,
        features=[
            "Advanced risk analysis",
            "Real-time monitoring",
            "Priority support",
            "Custom webhooks",
        ],
    ),
    "pro": Plan(
        name="Professional",
        price=99,
        api_calls=50000,
        features=[
            "Enterprise risk models",
            "Advanced compliance reports",
            "Dedicated support",
            "Custom integrations",
            "SLA guarantee",
        ],
    ),
    "enterprise": Plan(
        name="Enterprise",
        price=299,
        api_calls=UNLIMITED,
        features=[
            "Custom risk models",
            "White-label solution",
            "24/7 phone support",
            "On-premise deployment",
            "Custom SLA",
        ],
    ),
}

DEFAULT_PLAN = "free"


def get_plan(plan_type: str | None) -> Plan:
    """Unknown plan types fall back to the free plan."""
    return PLAN_FEATURES.get(plan_type or DEFAULT_PLAN, PLAN_FEATURES[DEFAULT_PLAN])
