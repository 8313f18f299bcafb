from pydantic import BaseModel


class Principal(BaseModel):
    """The Supabase user resolved from a bearer token"""

    id: str
    email: str | None = None


class UserProfile(BaseModel):
    """Row of the user_profiles table; columns this relay does not use are ignored"""

    id: str
    email: str | None = None
    stripe_customer_id: str | None = None
    subscription_id: str | None = None
    subscription_status: str | None = None

    model_config = {"extra": "ignore"}
