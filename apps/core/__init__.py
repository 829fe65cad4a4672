"""Framework-free helpers shared by the Django apps (validation rules, clock)."""
