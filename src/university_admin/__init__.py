"""University administration package.

This package is organized by feature modules (identities, profiles, registration,
courses, attendance, ...) with a thin Flask controller layer and service/repository
layers underneath.
"""
