"""Intern Attendance package.

This package is organized by feature modules (users, attendance, leaves, reports, ...)
with a thin Flask controller layer and service/repository layers underneath.
"""
