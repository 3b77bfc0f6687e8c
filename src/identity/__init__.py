"""Identity bounded context: marketplace users, roles and shipping preferences."""
