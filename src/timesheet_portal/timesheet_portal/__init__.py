"""Timesheet Portal package.

Members submit monthly attendance timesheets with transportation receipts;
teachers and admins review them. The package is organized by feature modules
with a thin Flask controller layer over service/repository layers.
"""
