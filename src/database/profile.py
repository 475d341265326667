"""
Acer Challenge - Profile Manager

CRUD operations for the `profiles` table.
"""

from supabase import Client

from src.database.models import Profile

PROFILE_COLUMNS = "id, username, email, age_band, created_at"


class ProfileManager:
    """Manages player profiles in Supabase."""

    def __init__(self, client: Client) -> None:
        self.client = client
        self.table = client.table("profiles")

    def create(self, username: str, email: str, age_band: str = "16+") -> Profile:
        """Insert a new profile."""
        data = (
            self.table
            .insert({
                "username": username,
                "email": email,
                "age_band": age_band,
            })
            .execute()
        )
        if not data.data:
            raise ValueError(f"Unable to create profile for {username!r}.")
        return Profile.model_validate(data.data[0])

    def get_by_username(self, username: str) -> Profile | None:
        """Look up a profile by username."""
        data = (
            self.table
            .select(PROFILE_COLUMNS)
            .eq("username", username)
            .execute()
        )
        if data.data:
            return Profile.model_validate(data.data[0])
        return None

    def get_or_create(self, username: str, email: str, age_band: str = "16+") -> Profile:
        """Return the existing profile for a username, creating it if needed."""
        existing = self.get_by_username(username)
        if existing is not None:
            return existing
        return self.create(username, email, age_band)
