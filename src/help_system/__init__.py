"""Help system: users, invitations, special access groups and help articles."""

__version__ = "1.0.0"
