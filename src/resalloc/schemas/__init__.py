"""Shared enums, validation outcomes and configuration models."""
