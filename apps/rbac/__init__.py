"""
RBAC (Role-Based Access Control) application.

Provides venue-scoped access control with:
- Global user identity system
- Per-venue roles with authority levels
- Per-venue role assignments with optional expiry
- Permission overrides where a live override decides its permission
- Append-only permission audit trail
"""
