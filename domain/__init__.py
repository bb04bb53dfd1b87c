"""Pure domain model for the home-energy CRM core (no I/O)."""
