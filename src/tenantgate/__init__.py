"""TenantGate - multi-tenant role-based access control.

Roles, hierarchical menus and the assignments between users, roles and
menus, resolved into per-user navigation trees and permission sets.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
