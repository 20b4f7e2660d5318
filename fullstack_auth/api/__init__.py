"""HTTP helpers shared by the API blueprints."""
