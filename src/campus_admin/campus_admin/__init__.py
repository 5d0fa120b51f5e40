"""Campus administration backend.

This package is organized by feature modules (users, students, faculty,
courses, attendance, grading, ...) with a thin Flask controller layer on top
of service and repository layers.
"""
