"""Attendance Console package.

Feature modules (students, branches, classes, attendance, ...) each carry a
model, a repository interface with its MySQL implementation, a service with
the business rules and a thin Flask controller that speaks JSON.
"""
