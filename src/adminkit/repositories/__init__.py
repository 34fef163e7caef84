"""Data access repositories."""

from adminkit.repositories.import_repo import ImportRepository
from adminkit.repositories.lead_repo import LeadRepository
from adminkit.repositories.user_repo import UserRepository

__all__ = ["ImportRepository", "LeadRepository", "UserRepository"]
