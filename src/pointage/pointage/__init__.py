"""Pointage data access package.

This package is organized by feature modules (users, employees, attendance,
biometrics) on top of a key-value store layer, with a thin Flask controller
layer calling the repositories.
"""
