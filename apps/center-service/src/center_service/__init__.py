"""Relief center service application package."""
