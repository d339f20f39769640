"""
Venues application.

A venue is the tenant every role, assignment, override and audit entry
is scoped to.
"""
