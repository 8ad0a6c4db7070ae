"""Care portal backend-for-frontend."""
