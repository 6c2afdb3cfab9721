"""tasks/ -- Per-user task records and the ownership policy that guards them.

Layer rule: tasks/ may import from core/ and auth.models only.
"""
