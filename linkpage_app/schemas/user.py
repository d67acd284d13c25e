from pydantic import BaseModel


PAID_PLANS = ("pro", "admin")


class CurrentUser(BaseModel):
    """
    Caller identity as asserted by the upstream auth gateway.

    Authentication itself happens before requests reach this service.
    """
    user_id: str
    plan: str = "free"
    role: str = "tenant"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def has_paid_plan(self) -> bool:
        return self.plan in PAID_PLANS
