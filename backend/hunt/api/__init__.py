"""HTTP blueprints for the hunt API."""
