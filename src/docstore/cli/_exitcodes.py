"""Process exit codes for the docstore CLI."""

SUCCESS = 0
GENERAL_ERROR = 1
USAGE_ERROR = 2
DATABASE_ERROR = 3
CONFLICT = 4
EXECUTION_FAILURE = 5
