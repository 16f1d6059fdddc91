"""Session engine: costs, roster, lifecycle, analytics and the service layer."""
