"""Shared utilities: telemetry, datetime handling, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""
