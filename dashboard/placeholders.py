# dashboard/placeholders.py
"""Static content for the dashboard until the real features land."""

COMING_SOON = "Coming Soon"

FEATURE_CARDS = [
    {"title": "Clients", "status": COMING_SOON, "description": "Manage your clients here"},
    {"title": "Quotes", "status": COMING_SOON, "description": "Create and manage quotes"},
    {"title": "Services", "status": COMING_SOON, "description": "Manage your services and products"},
    {"title": "Reports", "status": COMING_SOON, "description": "GST reports and analytics"},
]

COMING_FEATURES = [
    "Client Management",
    "Quote Generation with GST",
    "Service & Product Catalog",
    "GST Compliance Reports",
    "User Profile Management",
]
