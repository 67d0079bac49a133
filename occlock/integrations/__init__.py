"""Optional storage backends for occlock."""
