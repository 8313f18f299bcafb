"""
Application Constants

Values shared between the routes, services and tests.
"""

# Service identity
APP_NAME = "AI Media Dashboard Relay"
SERVICE_NAME = "media-relay-backend"

# Defaults
DEFAULT_PORT = 3001
DEFAULT_TRIAL_PERIOD_DAYS = 2
DEFAULT_MMM_API_URL = "https://mmm-api-backend-7tbm.onrender.com/api/run-mmm"

# Supabase
PROFILES_TABLE = "user_profiles"

# Stripe webhook event types that project into user_profiles
EVENT_CHECKOUT_COMPLETED = "checkout.session.completed"
EVENT_SUBSCRIPTION_UPDATED = "customer.subscription.updated"
EVENT_SUBSCRIPTION_DELETED = "customer.subscription.deleted"

STRIPE_SIGNATURE_HEADER = "stripe-signature"
ANALYTICS_API_KEY_HEADER = "x-api-key"

# Redirect query strings appended to APP_URL
CHECKOUT_SUCCESS_QUERY = "payment_success=true"
CHECKOUT_CANCEL_QUERY = "payment_cancel=true"

# Route prefixes
BILLING_PREFIX = "/api/billing"
GENERATION_PREFIX = "/api/generation"
ANALYTICS_PREFIX = "/api/analytics"

# Paths used by the first frontend release
LEGACY_BILLING_PREFIX = "/api/stripe"
LEGACY_GENERATION_PREFIX = "/api/gemini"
LEGACY_ANALYTICS_PREFIX = "/api/mmm"
