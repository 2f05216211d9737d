"""
Permission feature module.

Implements role-based permission rules, the composite per-organization
checks built on them, and the activity log.
"""
