"""
Role-based authorization for user management.

A fixed role table decides which accounts a role may create, view, edit or
delete, and which application modules it may reach.
"""
