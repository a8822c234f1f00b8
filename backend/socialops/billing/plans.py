PLAN_ORDER = ("FREE", "STARTER", "PROFESSIONAL", "ENTERPRISE")

# Prices in cents. Operators can override any plan through PricingPlan rows.
SUBSCRIPTION_PLANS: dict[str, dict] = {
    "FREE": {
        "name": "Free",
        "description": "Perfect for trying out the platform",
        "price": 0,
        "price_display": "Free",
        "limits": {"posts": 5, "users": 1, "aiCredits": 10},
        "features": [
            "5 posts per month",
            "1 user",
            "10 AI credits",
            "Basic AI models",
            "LinkedIn integration",
            "Email support",
        ],
        "popular": False,
    },
    "STARTER": {
        "name": "Starter",
        "description": "Great for small teams getting started",
        "price": 2900,
        "price_display": "$29/month",
        "limits": {"posts": 50, "users": 3, "aiCredits": 500},
        "features": [
            "50 posts per month",
            "3 users",
            "500 AI credits",
            "All AI models (GPT-4, Claude, Gemini)",
            "Auto-Pilot mode",
            "Brand training",
            "Content sources (RSS)",
            "Priority email support",
        ],
        "popular": False,
    },
    "PROFESSIONAL": {
        "name": "Professional",
        "description": "For growing businesses and teams",
        "price": 9900,
        "price_display": "$99/month",
        "limits": {"posts": 200, "users": 10, "aiCredits": 2000},
        "features": [
            "200 posts per month",
            "10 users",
            "2,000 AI credits",
            "All AI models (GPT-4, Claude, Gemini)",
            "Auto-Pilot mode",
            "Advanced brand training",
            "Unlimited content sources",
            "Brand assets & watermarks",
            "Analytics dashboard",
            "Team collaboration",
            "Priority support",
        ],
        "popular": True,
    },
    "ENTERPRISE": {
        "name": "Enterprise",
        "description": "Custom solutions for large organizations",
        "price": 29900,
        "price_display": "$299/month",
        # 9999 is "unlimited" in practice
        "limits": {"posts": 9999, "users": 9999, "aiCredits": 9999},
        "features": [
            "Unlimited posts",
            "Unlimited users",
            "Unlimited AI credits",
            "All features included",
            "Custom AI model fine-tuning",
            "White-label options",
            "Custom integrations",
            "Dedicated account manager",
            "SLA guarantees",
            "24/7 phone support",
        ],
        "popular": False,
    },
}


def plan_limits(plan_id: str) -> dict:
    return dict(SUBSCRIPTION_PLANS[plan_id]["limits"])
