"""
OpenAPI Tags Configuration for the EventHub API

Defines tags and descriptions for organized API documentation.
"""

tags_metadata = [
    {
        "name": "auth",
        "description": """
**Admin Authentication**

Sign-up, sign-in and session control for dashboard administrators.

**Authentication Flow:**
1. Sign in with email and password to get a bearer token
2. Send the token in the Authorization header
3. Log out to end the session; the token stops working immediately
        """,
        "externalDocs": {
            "description": "JWT Authentication Guide",
            "url": "https://fastapi.tiangolo.com/tutorial/security/oauth2-jwt/",
        },
    },
    {
        "name": "events",
        "description": """
**Event Catalog**

Public browsing and registration.

**Features:**
- Free-text search over title and description
- Category filter with an `All` choice
- Pages of 12 events with navigation flags
- Availability: `available`, `almost_full` (10 spots or fewer) and `sold_out`
- Attendee registration with derived free/paid ticket type
        """,
    },
    {
        "name": "admin",
        "description": """
**Admin Dashboard**

Event and registration management. Requires an active admin session.

Every change returns a notice and the reloaded list, whether it succeeded
or not. Deletes require `confirm=true`.
        """,
    },
    {
        "name": "contact",
        "description": """
**Contact Support**

Queue a message for the support inbox.
        """,
    },
    {
        "name": "Root",
        "description": "API information and links to documentation.",
    },
    {
        "name": "Health",
        "description": "Database and Redis health checks.",
    },
    {
        "name": "Monitoring",
        "description": "Prometheus metrics exposition.",
    },
]

security_schemes = {
    "BearerAuth": {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT",
        "description": """
JWT bearer authentication for admin endpoints.

**How to authenticate:**
1. Sign in via `/auth/login` to get your token
2. Include it in the Authorization header: `Authorization: Bearer <your_token>`
3. The token is valid until it expires or you log out
        """,
    }
}

# Tags whose operations need a bearer token
SECURED_TAGS = {"admin"}
