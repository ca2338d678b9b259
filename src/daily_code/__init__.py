"""Code-of-the-day service for clinic front desks."""
