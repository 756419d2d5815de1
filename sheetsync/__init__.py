"""sheetsync: bring an .xlsx worksheet in line with a CSV snapshot.

Rows are matched by one key column; new keys are appended below the existing
rows and existing keys get only their differing cells rewritten.
"""

__version__ = "0.1.0"
