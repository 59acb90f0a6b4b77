"""Small pure helpers shared across subsystems."""
