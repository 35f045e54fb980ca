"""
SNBD HOST Expense Tracker - Source Package

Records company expenses, prints them as a paginated PDF report and keeps
them in a Google Sheets spreadsheet for the approvers.

DESIGN PRINCIPLES:
1. Expenses stay local until the user saves them
2. Fail early, fail visibly
3. No automatic retries
4. Every step must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "SNBD HOST"
