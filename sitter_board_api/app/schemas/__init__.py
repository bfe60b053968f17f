"""
Pydantic schema definitions for API payloads and stored records.

Notices (with their embedded applications) and profiles are persisted
as the JSON form of these models, so the same classes describe both
the HTTP representation and the store documents.
"""
