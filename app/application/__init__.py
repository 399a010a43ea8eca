"""Application layer: DTOs and services.

Services depend on repository objects passed in by the API layer; they
never open sessions themselves.
"""
