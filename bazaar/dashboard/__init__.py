"""
Dashboards
Seller and admin CRUD services and the form state machine they share.
"""

from .admin import AdminDashboard, UserWithRoles
from .forms import DashboardForm, FormState, InvalidTransitionError
from .seller import ProductCreateResult, SellerDashboard

__all__ = [
    "AdminDashboard",
    "UserWithRoles",
    "DashboardForm",
    "FormState",
    "InvalidTransitionError",
    "ProductCreateResult",
    "SellerDashboard",
]
