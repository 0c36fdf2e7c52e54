"""Dabestan: elementary school administration service.

Feature modules (students, classes, attendance, payments, ...) each carry a
domain model, a repository interface with a MySQL implementation, a service
holding the business rules and a thin Flask controller.
"""
