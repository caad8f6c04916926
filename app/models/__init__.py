"""Database models — re-exports all models.

Import from here:  from app.models import Quote, MaintenanceRequest, ...
Or from submodules: from app.models.quotes import Quote
"""

from .base import Base  # noqa: F401

# Auth, Users & Tenants
from .auth import Organization, User  # noqa: F401

# Properties & Contractors
from .properties import Property  # noqa: F401
from .contractors import Contractor  # noqa: F401

# Maintenance Requests
from .maintenance import MaintenanceRequest  # noqa: F401

# Quotes & Audit Trail
from .quotes import Quote, QuoteLog  # noqa: F401

# In-app Notifications
from .notifications import Notification  # noqa: F401
