"""Task lifecycle engine for hospitality maintenance and housekeeping work."""
