"""SmartRent property-management API."""
