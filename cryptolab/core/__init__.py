"""Protocol engines and shared infrastructure."""
