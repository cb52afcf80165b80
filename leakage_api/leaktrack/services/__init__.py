"""Domain services: orchestration across repositories, storage and aggregation."""
