"""Application layer - ports, DTOs and services."""
