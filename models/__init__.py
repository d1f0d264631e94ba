"""Pick grading data models."""
