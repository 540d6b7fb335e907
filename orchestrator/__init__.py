"""Entry point and configuration for MediConnect."""
