"""Domain layer: pure lead-relay logic and the ports it depends on."""
